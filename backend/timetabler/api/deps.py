import random

from fastapi import Depends

from timetabler.core.config import Settings, get_settings


def get_app_settings() -> Settings:
    return get_settings()


def get_random_source(settings: Settings = Depends(get_app_settings)) -> random.Random:
    # A fresh source per request; seeded only when configured.
    return random.Random(settings.random_seed)
