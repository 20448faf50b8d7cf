from __future__ import annotations
import copy, logging, os, time
from functools import wraps
from typing import Any, Callable, Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

logger = logging.getLogger("ccmerge")

DEFAULTS: dict = {
    "directories": [],
    "input_name": "compile_commands.json",
    "output": "compile_commands.json",
    "output_indent": 2,
    "watch": {
        "enabled": True,
        "use_polling": False,
        "poll_seconds": 1.0,
        "queue_timeout": 0.5,
        "read_retries": 3,
        "retry_delay": 0.2,
    },
    "logging": {
        "level": "INFO",
        "file": None,
    },
}


class ConfigError(ValueError):
    pass


class Retryable(Exception):
    pass


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        ensure_parent_dir(log_file)
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, handlers=handlers, force=True)


def retry(times: int = 3, delay: float = 1.0):
    def deco(fn: Callable[..., Any]):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            last = None
            for i in range(times):
                try:
                    return fn(*args, **kwargs)
                except Retryable as e:
                    last = e
                    if i + 1 < times:
                        logger.debug(f"Retry {i+1}/{times} for {fn.__name__}: {e}")
                        time.sleep(delay * (2 ** i))
            raise last if last else Retryable(f"{fn.__name__} was not attempted")
        return wrapper
    return deco


def load_yaml(path: str) -> dict:
    import yaml
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping, got {type(data).__name__}")
    return data


def _merge(base: dict, override: dict, where: str = "") -> dict:
    for key, value in override.items():
        if key not in base:
            raise ConfigError(f"Unknown config key: {where}{key}")
        if isinstance(base[key], dict):
            if not isinstance(value, dict):
                raise ConfigError(f"Config key {where}{key} must be a mapping")
            _merge(base[key], value, f"{where}{key}.")
        else:
            base[key] = value
    return base


def load_config(cfg_path: Optional[str] = None) -> dict:
    """Defaults, overlaid with the YAML file at ``cfg_path`` (or $CCMERGE_CONFIG)."""
    cfg = copy.deepcopy(DEFAULTS)
    cfg_path = cfg_path or os.getenv("CCMERGE_CONFIG")
    if cfg_path:
        try:
            _merge(cfg, load_yaml(cfg_path))
        except OSError as e:
            raise ConfigError(f"Cannot read config {cfg_path}: {e}") from e
    env_level = os.getenv("CCMERGE_LOG_LEVEL")
    if env_level:
        cfg["logging"]["level"] = env_level
    if isinstance(cfg["directories"], str):
        cfg["directories"] = split_dirs([cfg["directories"]])
    return cfg


def split_dirs(values) -> list[str]:
    # "-d a,b -d c" -> ["a", "b", "c"]
    out = []
    for v in values or []:
        out.extend(p.strip() for p in str(v).split(",") if p.strip())
    return out


def ensure_parent_dir(path: str):
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)


def same_path(a: str, b: str) -> bool:
    return os.path.normcase(os.path.realpath(a)) == os.path.normcase(os.path.realpath(b))
