from dataclasses import dataclass

from src.userapi.core.services import DbSessionService
from src.userapi.runtime.config.config_data import ConfigData


@dataclass
class ApplicationDependencies:
    config: ConfigData
    database_service: DbSessionService
