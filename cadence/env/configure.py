from cadence.logging.config import LoggingConfig

from .env import Env
from .load_env import load_env


def configure(
    env: Env | None = None,
    env_file: str | None = None,
) -> Env:
    """
    Apply environment settings to the process-wide logging config.

    When ``env`` is omitted it is loaded from the process environment
    and ``env_file`` (``.env`` by default). An explicit ``env`` wins
    over both.
    """
    env = load_env(Env, env_file=env_file, override=env)

    LoggingConfig().update(**env.get_logging_config())

    return env
