"""配置管理

支持多源配置，优先级从高到低：
1. 环境变量（FEEDSEARCH_*）
2. .env 文件
3. YAML 配置文件（conf.yaml）
4. 默认值

环境变量命名规范：
- FEEDSEARCH_ELASTIC_URL
- FEEDSEARCH_POSTS_URL
- FEEDSEARCH_MOCK_ELASTIC (单下划线分隔)
"""

import os
from enum import Enum
from pathlib import Path
from typing import Literal

# 加载 .env 文件（必须在任何导入之前执行）
from dotenv import load_dotenv  # noqa: E402
from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

load_dotenv()  # noqa: E402

# YAML 配置文件路径
CONFIG_FILE = Path("conf.yaml")


class Environment(str, Enum):
    """环境类型"""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TEST = "test"

    @property
    def is_development(self) -> bool:
        return self == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        return self == Environment.PRODUCTION


def detect_environment() -> Environment:
    """检测当前环境"""
    env = os.getenv("FEEDSEARCH_ENV", os.getenv("ENVIRONMENT", "development"))
    try:
        return Environment(env)
    except ValueError:
        return Environment.DEVELOPMENT


class Settings(BaseSettings):
    """应用配置"""

    app_name: str = "feedsearch"
    environment: Environment = Field(default_factory=detect_environment)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "console"] = "console"

    elastic_url: str = "http://localhost"
    elastic_port: int = 9200
    elastic_username: str | None = None
    elastic_password: str | None = None
    elastic_api_key: str | None = None
    elastic_verify_certs: bool = True
    elastic_index: str = "posts"

    elastic_max_results_per_page: int = Field(default=5, ge=1)
    elastic_max_result_window: int = Field(default=10_000, ge=1)  # index.max_result_window
    elastic_delay_ms: int = Field(default=10_000, ge=0)
    elastic_poll_interval_ms: int = Field(default=500, gt=0)

    # 使用内存实现代替 Elasticsearch（本地开发、测试）
    mock_elastic: bool = False

    posts_url: str = "http://localhost/v1/posts"

    model_config = SettingsConfigDict(
        env_prefix="feedsearch_",
        case_sensitive=False,
        extra="ignore",
        yaml_file=CONFIG_FILE,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # YAML 优先级低于环境变量
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    @field_validator("elastic_url")
    @classmethod
    def validate_elastic_url(cls, v: str) -> str:
        """去掉末尾的斜杠，端口由 elastic_port 单独指定"""
        return v.rstrip("/")

    @property
    def is_production(self) -> bool:
        return self.environment.is_production

    @property
    def elastic_hosts(self) -> list[str]:
        """Elasticsearch 主机地址列表"""
        return [f"{self.elastic_url}:{self.elastic_port}"]

    def model_post_init(self, __context) -> None:
        """初始化后处理"""
        if self.is_production and self.log_format == "console":
            self.log_format = "json"


_settings: Settings | None = None


def get_settings() -> Settings:
    """获取配置实例（单例）

    Returns:
        Settings 实例
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """重新加载配置

    Returns:
        新的 Settings 实例
    """
    global _settings
    _settings = None
    return get_settings()
