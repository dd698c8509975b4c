"""驾驶员警觉监测系统入口文件"""

import argparse
import logging
import sys
import time

import cv2

from config import load_config, to_monitor_config
from detectors.face_detector import DEFAULT_MODEL_PATH, FaceDetector
from display.alarm import DEFAULT_ALARM_PATH, AlarmPlayer
from display.renderer import DisplayRenderer
from monitor.alertness_monitor import AlertnessMonitor

logger = logging.getLogger(__name__)


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class DetectionSystem:
    """警觉监测主程序，协调检测、状态归约、报警和渲染，管理视频流主循环。"""

    def __init__(
        self,
        config_path=None,
        camera=0,
        model_path=DEFAULT_MODEL_PATH,
        alarm_path=DEFAULT_ALARM_PATH,
        mirror=True,
        alarm_enabled=True,
    ):
        self.camera = camera
        self._cap = None

        # 加载配置
        self.config = load_config(config_path)

        # 初始化各模块
        self.face_detector = FaceDetector(model_path=model_path)
        self.monitor = AlertnessMonitor(to_monitor_config(self.config))
        self.alarm = AlarmPlayer(alarm_path, enabled=alarm_enabled)
        self.renderer = DisplayRenderer(mirror=mirror)

    def process_frame(self, frame, now):
        """处理单帧：检测 -> 归约 -> 报警 -> 渲染，返回 (FrameOutput, 渲染帧)。"""
        landmarks = self.face_detector.detect(frame, now)
        output = self.monitor.step(landmarks, now)
        self.alarm.update(output.drowsy_warning)
        return output, self.renderer.render(frame, output)

    def run(self):
        """启动主检测循环。"""
        self._cap = cv2.VideoCapture(self.camera)

        if not self._cap.isOpened():
            logger.error("无法打开摄像头 %s", self.camera)
            sys.exit(1)

        try:
            self._main_loop()
        finally:
            self.stop()

    def _main_loop(self):
        """视频流处理主循环。"""
        while True:
            ret, frame = self._cap.read()
            if not ret:
                continue

            _, rendered = self.process_frame(frame, monotonic_ms())
            cv2.imshow("Face Tracking", rendered)

            # 按 q 退出
            if cv2.waitKey(1) & 0xFF == ord("q"):
                break

    def stop(self):
        """释放摄像头、关闭窗口、停止报警、关闭人脸检测器。"""
        if self._cap is not None and self._cap.isOpened():
            self._cap.release()
        cv2.destroyAllWindows()
        self.alarm.close()
        self.face_detector.close()


def build_parser():
    parser = argparse.ArgumentParser(description="驾驶员警觉监测系统")
    parser.add_argument("--config", type=str, default=None, help="JSON 阈值配置文件路径")
    parser.add_argument("--camera", type=int, default=0, help="摄像头编号")
    parser.add_argument("--model", type=str, default=DEFAULT_MODEL_PATH, help="FaceLandmarker 模型路径")
    parser.add_argument("--alarm", type=str, default=DEFAULT_ALARM_PATH, help="报警音文件路径")
    parser.add_argument("--no-alarm", action="store_true", help="禁用报警音")
    parser.add_argument("--no-mirror", action="store_true", help="不镜像显示")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        system = DetectionSystem(
            config_path=args.config,
            camera=args.camera,
            model_path=args.model,
            alarm_path=args.alarm,
            mirror=not args.no_mirror,
            alarm_enabled=not args.no_alarm,
        )
    except (FileNotFoundError, ValueError) as e:
        logger.error("%s", e)
        sys.exit(1)

    system.run()


if __name__ == "__main__":
    main()
