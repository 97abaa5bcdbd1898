import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class HostConfig:
    """
    Dataclass for host configuration.
    """

    api_base: str
    agent_base: str
    proxy_host: str
    proxy_upstream: str
    cors_allowed_origins: str


@dataclass(frozen=True)
class AgentConfig:
    """
    Dataclass for finance agent configuration.
    """

    ask_path: str
    request_timeout: int
    export_timeout: int
    default_export_filename: str
    company_id: int


@dataclass(frozen=True)
class PathConfig:
    """
    Dataclass for path configuration.
    """

    logs: Path
    exports: Path


def load_host_env() -> HostConfig:
    """
    Loads host configuration from environment variables or defaults.

    Returns:
        HostConfig: Dataclass containing host configuration.
        - api_base (str): Public backend URL, used to absolutize chart links.
        - agent_base (str): Backend URL of the finance agent, shown in the sidebar.
        - proxy_host (str): URL of the forwarding proxy used for agent, export and query calls.
        - proxy_upstream (str): Backend origin the proxy forwards to.
        - cors_allowed_origins (str): Comma-separated list of allowed CORS origins.
    """
    api_base = os.getenv("DJANGO_API_BASE", "http://localhost:8000")
    return HostConfig(
        api_base=api_base,
        agent_base=os.getenv("AGENT_BASE", api_base),
        proxy_host=os.getenv("PROXY_HOST", "http://localhost:8001"),
        proxy_upstream=os.getenv("DJANGO_PROXY_BASE", "http://localhost:8000"),
        cors_allowed_origins=os.getenv(
            "CORS_ALLOWED_ORIGINS", "http://localhost:8501,http://127.0.0.1:8501"
        ),
    )


def load_agent_env() -> AgentConfig:
    """
    Loads agent configuration from environment variables or defaults.

    Returns:
        AgentConfig: Dataclass containing agent configuration.
        - ask_path (str): Path of the agent endpoint below the proxy host.
        - request_timeout (int): Timeout in seconds for a single agent dispatch.
        - export_timeout (int): Timeout in seconds for a CSV export replay.
        - default_export_filename (str): Filename used when the backend sends none.
        - company_id (int): Company selected when a session starts.
    """
    return AgentConfig(
        ask_path=os.getenv("AGENT_ASK_PATH", "/api/agent/ask"),
        request_timeout=int(os.getenv("AGENT_REQUEST_TIMEOUT", "120")),
        export_timeout=int(os.getenv("EXPORT_REQUEST_TIMEOUT", "120")),
        default_export_filename=os.getenv("EXPORT_DEFAULT_FILENAME", "export.csv"),
        company_id=int(os.getenv("FINCH_COMPANY_ID", "1")),
    )


def load_path_env() -> PathConfig:
    """
    Loads path configuration from environment variables or defaults.

    Returns:
        PathConfig: Dataclass containing path configuration.
        - logs (Path): Path to the log file.
        - exports (Path): Directory the CLI saves exported CSV files to.
    """
    project_root: Path = Path(__file__).parents[2].resolve()
    data_dir: Path = Path.home() / "finch"

    return PathConfig(
        logs=Path(
            os.getenv("LOG_PATH", project_root / ".logs" / "finch.log")
        ).expanduser(),
        exports=Path(os.getenv("EXPORTS_PATH", data_dir / "exports")).expanduser(),
    )
