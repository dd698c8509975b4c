"""报警音播放模块"""

import logging
import os

import pygame

logger = logging.getLogger(__name__)

DEFAULT_ALARM_PATH = "assets/alarm.wav"


class AlarmPlayer:
    """困倦时循环播放报警音，恢复时停止；重复调用相同状态不产生副作用"""

    def __init__(self, sound_path: str = DEFAULT_ALARM_PATH, volume: float = 1.0, enabled: bool = True):
        self.enabled = enabled
        self.sound = None
        self.is_playing = False

        if not self.enabled:
            logger.info("报警音已禁用")
            return

        if not os.path.exists(sound_path):
            logger.warning("报警音文件不存在: %s，报警音已禁用", sound_path)
            self.enabled = False
            return

        try:
            pygame.mixer.init()
            self.sound = pygame.mixer.Sound(sound_path)
            self.sound.set_volume(volume)
        except pygame.error as e:
            logger.warning("无法初始化音频设备: %s，报警音已禁用", e)
            self.enabled = False
            self.sound = None

    def update(self, active: bool) -> None:
        """每帧调用一次，active 为 True 时播放，False 时停止并回到开头"""
        if not self.enabled:
            return
        if active:
            self._play()
        else:
            self._stop()

    def _play(self):
        if self.sound and not self.is_playing:
            self.sound.play(loops=-1)
            self.is_playing = True

    def _stop(self):
        # Sound.stop() 之后再次 play() 从头播放
        if self.sound and self.is_playing:
            self.sound.stop()
            self.is_playing = False

    def close(self):
        """停止播放并释放音频设备"""
        if self.enabled:
            self._stop()
            pygame.mixer.quit()
