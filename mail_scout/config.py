# === FILE: mail_scout/config.py ===
"""
Загрузка и валидация конфигурации MailScout.
Схема описана на Pydantic, значения читаются из YAML или JSON.
"""
from __future__ import annotations

import errno
import json
import os
import random
from pathlib import Path
from typing import Any, Dict, List, Literal, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

DEFAULT_USER_AGENTS: List[str] = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:123.0) Gecko/20100101 Firefox/123.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:123.0) Gecko/20100101 Firefox/123.0",
]

DEFAULT_HEADERS: Dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
}


class DelayRange(BaseModel):
    """Closed interval of seconds; every wait is drawn uniformly from it."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    min_seconds: float = Field(0.0, ge=0)
    max_seconds: float = Field(0.0, ge=0)

    @model_validator(mode="after")
    def _check_order(self) -> DelayRange:
        if self.min_seconds > self.max_seconds:
            raise ValueError("min_seconds must not exceed max_seconds")
        return self

    def sample(self, rng: random.Random | None = None) -> float:
        return (rng or random).uniform(self.min_seconds, self.max_seconds)


class RateLimitConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    max_requests: int = Field(8, ge=1, description="Запросов в скользящем окне.")
    time_window: float = Field(60.0, gt=0, description="Длина окна (секунд).")
    jitter: DelayRange = Field(
        default_factory=lambda: DelayRange(min_seconds=3.0, max_seconds=7.0),
        description="Случайная пауза после каждого разрешённого запроса.",
    )


class ViewportConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    width: int = Field(1366, ge=1)
    height: int = Field(768, ge=1)
    jitter: int = Field(100, ge=0, description="Случайная добавка к ширине и высоте (px).")


class ScoutConfig(BaseModel):
    """Конфигурация одного запуска MailScout."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    input_file: Path = Field(Path("companydetails.txt"), description="Таблица компаний.")
    output_dir: Path = Field(Path("scraped_data"), description="Каталог для отчётов.")
    renderer: Literal["playwright", "http"] = Field("playwright", description="Бэкенд загрузки страниц.")
    headless: bool = True

    max_pages_per_site: int = Field(25, ge=1, description="Жёсткий лимит страниц на сайт.")
    max_links_per_page: int = Field(15, ge=1, description="Сколько ссылок брать с одной страницы.")
    max_retries: int = Field(3, ge=0, description="Повторы загрузки страницы.")
    retry_backoff: float = Field(5.0, ge=0, description="Шаг линейного backoff (секунд).")
    page_timeout: float = Field(60.0, gt=0, description="Таймаут навигации (секунд).")

    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    settle_delay: DelayRange = Field(
        default_factory=lambda: DelayRange(min_seconds=2.0, max_seconds=5.0)
    )
    site_delay: DelayRange = Field(
        default_factory=lambda: DelayRange(min_seconds=10.0, max_seconds=25.0)
    )

    user_agents: List[str] = Field(default_factory=lambda: list(DEFAULT_USER_AGENTS), min_length=1)
    extra_headers: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_HEADERS))
    blocked_resource_types: List[str] = Field(default_factory=lambda: ["image", "media", "font"])
    viewport: ViewportConfig = Field(default_factory=ViewportConfig)

    json_reports: bool = Field(False, description="Писать JSON рядом с текстовым отчётом.")
    progress_every: int = Field(5, ge=1)

    @field_validator("user_agents")
    def _strip_agents(cls, v: List[str]) -> List[str]:
        agents = [a.strip() for a in v if a.strip()]
        if not agents:
            raise ValueError("user_agents must contain at least one non-empty entry")
        return agents


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> ScoutConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект ScoutConfig.
    Без пути берёт configs/default.yaml, а если его нет, то значения по умолчанию.
    """
    if path is None:
        if not _DEFAULT_CFG.is_file():
            return ScoutConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    return ScoutConfig(**data)


__all__ = [
    "DEFAULT_HEADERS",
    "DEFAULT_USER_AGENTS",
    "DelayRange",
    "RateLimitConfig",
    "ScoutConfig",
    "ViewportConfig",
    "load_config",
]
