from .app_setting import AppSetting
from .sequence_counter import SequenceCounter

__all__ = ["AppSetting", "SequenceCounter"]
