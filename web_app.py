"""Flask Web 前端 - 驾驶员警觉监测系统"""

import dataclasses
import datetime
import logging
import threading
import time

import cv2
from flask import Flask, Response, jsonify, render_template, request

from config import DEFAULTS, to_monitor_config
from detectors.face_detector import DEFAULT_MODEL_PATH, FaceDetector
from display.alarm import DEFAULT_ALARM_PATH, AlarmPlayer
from display.renderer import DisplayRenderer
from models.data_models import EYES_CLOSED
from monitor.alertness_monitor import AlertnessMonitor

logger = logging.getLogger(__name__)

app = Flask(__name__, template_folder="web/templates")

_REASON_TEXT = {"eye_closure": "持续闭眼", "blink_rate": "眨眼过频"}


def output_to_dict(output):
    """FrameOutput 转为 JSON 可序列化的字典（不含叠加点）。"""
    return {
        "ear": round(output.ear, 4),
        "eye_status": output.eye_status,
        "emotion": output.emotion.value,
        "blinks_per_minute": output.blinks_per_minute,
        "drowsy_warning": output.drowsy_warning,
        "reasons": list(output.reasons),
        "face_detected": output.face_detected,
        "frame_skipped": output.frame_skipped,
        "smooth_offset": round(output.smooth_offset, 4),
    }


class WebDetectionSystem:
    """Web 版检测系统，支持 MJPEG 视频流推送和实时数据 API。"""

    MAX_LOG_ENTRIES = 200

    def __init__(self, model_path=DEFAULT_MODEL_PATH, alarm_path=DEFAULT_ALARM_PATH, camera=0):
        self.model_path = model_path
        self.camera = camera
        self._cap = None
        self._thread = None
        self._running = False
        self._lock = threading.Lock()
        self._latest_frame = None
        self._latest_data = {
            "ear": 0.0, "eye_status": "Eyes: Open", "emotion": "Neutral",
            "blinks_per_minute": 0, "drowsy_warning": False, "reasons": [],
            "face_detected": False, "frame_skipped": False, "smooth_offset": 0.0,
        }
        self._logs = []
        self._log_seq = 0
        self._log_lock = threading.Lock()
        self._prev_state = {"face_detected": True, "eye_closed": False, "drowsy_warning": False}
        self.config = dict(DEFAULTS)
        self.face_detector = None
        self.monitor = AlertnessMonitor(to_monitor_config(self.config))
        self.renderer = DisplayRenderer()
        self.alarm = AlarmPlayer(alarm_path)

    def start(self):
        """打开摄像头并启动处理线程。"""
        if self._running:
            return True
        if self.face_detector is None:
            try:
                self.face_detector = FaceDetector(model_path=self.model_path)
            except FileNotFoundError as e:
                self._add_log("danger", str(e))
                return False
        self._cap = cv2.VideoCapture(self.camera)
        if not self._cap.isOpened():
            self._add_log("danger", "无法打开摄像头")
            return False
        self._running = True
        self._add_log("info", "系统启动，摄像头已开启")
        self._thread = threading.Thread(target=self._process_loop, daemon=True)
        self._thread.start()
        return True

    def stop(self):
        """停止检测，清空跨帧状态。"""
        self._running = False
        if self._thread is not None:
            self._thread.join(timeout=1.0)
            self._thread = None
        if self._cap is not None and self._cap.isOpened():
            self._cap.release()
        self._cap = None
        self.alarm.update(False)
        self.monitor.reset()
        self._add_log("info", "系统已停止")

    def _process_loop(self):
        """后台处理循环，单线程串行调用归约器。"""
        while self._running:
            if not self._cap or not self._cap.isOpened():
                break
            ret, frame = self._cap.read()
            if not ret:
                continue

            now = time.monotonic() * 1000.0
            landmarks = self.face_detector.detect(frame, now)
            output = self.monitor.step(landmarks, now)
            self.alarm.update(output.drowsy_warning)
            rendered = self.renderer.render(frame, output)

            data = output_to_dict(output)
            _, jpeg = cv2.imencode(".jpg", rendered, [cv2.IMWRITE_JPEG_QUALITY, 80])
            with self._lock:
                self._latest_data = data
                self._latest_frame = jpeg.tobytes()

            self._check_state_changes(data)

    def _add_log(self, level, message):
        """添加一条系统日志。level: info / warning / danger"""
        entry = {
            "time": datetime.datetime.now().strftime("%H:%M:%S"),
            "level": level,
            "message": message,
        }
        logger.info("[%s] %s", level, message)
        with self._log_lock:
            entry["seq"] = self._log_seq
            self._log_seq += 1
            self._logs.append(entry)
            if len(self._logs) > self.MAX_LOG_ENTRIES:
                self._logs = self._logs[-self.MAX_LOG_ENTRIES:]

    def _check_state_changes(self, data):
        """检测状态变化并记录日志。"""
        prev = self._prev_state
        if data.get("frame_skipped"):
            return

        face = data.get("face_detected", False)
        closed = data.get("eye_status") == EYES_CLOSED
        drowsy = data.get("drowsy_warning", False)

        if face and not prev["face_detected"]:
            self._add_log("info", "检测到人脸")
        elif not face and prev["face_detected"]:
            self._add_log("warning", "人脸丢失")

        if closed and not prev["eye_closed"]:
            self._add_log("warning", f"闭眼 (EAR={data.get('ear', 0):.2f})")
        elif not closed and prev["eye_closed"]:
            self._add_log("info", "睁眼恢复")

        if drowsy and not prev["drowsy_warning"]:
            reasons = ", ".join(_REASON_TEXT.get(r, r) for r in data.get("reasons", []))
            self._add_log("danger", f"困倦警告！原因: {reasons}")
        elif not drowsy and prev["drowsy_warning"]:
            self._add_log("info", "困倦状态解除")

        self._prev_state = {"face_detected": face, "eye_closed": closed, "drowsy_warning": drowsy}

    def get_logs(self, since=0):
        """获取序号不小于 since 的日志，返回 (日志列表, 累计日志总数)。"""
        with self._log_lock:
            return [e for e in self._logs if e["seq"] >= since], self._log_seq

    def get_frame(self):
        with self._lock:
            return self._latest_frame

    def get_data(self):
        with self._lock:
            return dict(self._latest_data)

    def update_config(self, config):
        """动态更新阈值配置，未知字段忽略，跨帧状态重置。"""
        merged = dict(self.config)
        for key in DEFAULTS:
            if key in config and config[key] is not None:
                merged[key] = config[key]
        new_config = to_monitor_config(merged)
        # 先构建新实例，参数非法时抛出 ValueError，旧状态不受影响
        monitor = AlertnessMonitor(new_config)
        with self._lock:
            self.monitor = monitor
            self.config = merged
        return dataclasses.asdict(new_config)


# 全局检测系统实例
system = WebDetectionSystem()


# ---- Flask 路由 ----

@app.route("/")
def index():
    return render_template("index.html")


@app.route("/api/start", methods=["POST"])
def api_start():
    ok = system.start()
    return jsonify({"success": ok, "message": "摄像头启动成功" if ok else "无法启动检测"})


@app.route("/api/stop", methods=["POST"])
def api_stop():
    system.stop()
    return jsonify({"success": True, "message": "检测已停止"})


@app.route("/api/data")
def api_data():
    return jsonify(system.get_data())


@app.route("/api/config", methods=["GET", "POST"])
def api_config():
    if request.method == "GET":
        return jsonify(system.config)
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        return jsonify({"success": False, "message": "配置格式错误"}), 400
    try:
        config = system.update_config(data)
    except (TypeError, ValueError) as e:
        return jsonify({"success": False, "message": str(e)}), 400
    return jsonify({"success": True, "message": "配置已更新", "config": config})


@app.route("/api/logs")
def api_logs():
    since = request.args.get("since", 0, type=int)
    logs, total = system.get_logs(since)
    return jsonify({"logs": logs, "total": total})


@app.route("/video_feed")
def video_feed():
    def generate():
        while True:
            frame = system.get_frame()
            if frame is not None:
                yield (b"--frame\r\nContent-Type: image/jpeg\r\n\r\n" + frame + b"\r\n")
            time.sleep(0.03)
    return Response(generate(), mimetype="multipart/x-mixed-replace; boundary=frame")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    app.run(host="0.0.0.0", port=5000, debug=False, threaded=True)
