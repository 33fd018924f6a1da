from dataclasses import dataclass

from src.users_api.core.services import StorageGateway
from src.users_api.entities.user import UserRepository
from src.users_api.runtime.config.config_data import ConfigData


@dataclass
class ApplicationDependencies:
    config: ConfigData
    storage_gateway: StorageGateway
    user_repository: UserRepository
