"""阈值配置加载"""

import dataclasses
import json
import logging

from models.data_models import MonitorConfig

logger = logging.getLogger(__name__)

# 默认阈值
DEFAULTS = dataclasses.asdict(MonitorConfig())


def load_config(config_path=None):
    """从 JSON 配置文件加载阈值参数，缺失字段使用默认值。"""
    config = dict(DEFAULTS)

    if config_path is None:
        return config

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.warning("配置文件不存在 %s，使用默认阈值", config_path)
        return config
    except json.JSONDecodeError:
        logger.warning("配置文件格式错误 %s，使用默认阈值", config_path)
        return config

    if not isinstance(data, dict):
        logger.warning("配置文件格式错误 %s，使用默认阈值", config_path)
        return config

    # 用配置文件中的值覆盖默认值
    for key in DEFAULTS:
        if key in data and data[key] is not None:
            config[key] = data[key]

    return config


def _coerce(key, value):
    default = DEFAULTS[key]
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise ValueError(f"{key} must be a boolean, got {value!r}")
        return value
    if isinstance(value, bool):
        raise ValueError(f"{key} must be a number, got {value!r}")
    try:
        return type(default)(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{key} must be a number, got {value!r}") from e


def to_monitor_config(config):
    """字典配置转为 MonitorConfig，忽略未知字段，数值按默认值类型转换"""
    return MonitorConfig(**{k: _coerce(k, v) for k, v in config.items() if k in DEFAULTS})
