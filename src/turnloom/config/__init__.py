from turnloom.config.settings import Settings, CascadeMergeMode, settings

__all__ = ["Settings", "CascadeMergeMode", "settings"]
