"""Configuration models."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..query.filters import Period


class PostgresConfig(BaseModel):
    """Postgres configuration."""

    host: str = Field("localhost", description="Database host")
    port: int = Field(5432, description="Database port")
    database: str = Field("trendfeed", description="Database name")
    user: str = Field("trendfeed_user", description="Database user")
    password: Optional[str] = Field(None, description="Database password")
    password_env: Optional[str] = Field(None, description="Environment variable for password")
    min_pool_size: int = Field(1, ge=1)
    max_pool_size: int = Field(10, ge=1)


class QiitaConfig(BaseModel):
    """Qiita REST API settings."""

    api_base: str = Field("https://qiita.com/api/v2")
    access_token: Optional[str] = Field(None, description="API token (prefer access_token_env)")
    access_token_env: Optional[str] = Field("QIITA_ACCESS_TOKEN")
    per_page: int = Field(100, ge=1, le=100)
    min_stocks: int = Field(10, ge=0, description="Minimum stocks in the search query")
    lookback_days: int = Field(7, ge=1, description="Only items created in this window")


class ZennConfig(BaseModel):
    """Zenn articles API settings."""

    api_base: str = Field("https://zenn.dev/api")
    order: str = Field("daily", description="latest, daily, weekly or monthly")
    count: int = Field(50, ge=1, le=100)

    @field_validator("order")
    @classmethod
    def validate_order(cls, v: str) -> str:
        """Only orderings the API understands."""
        if v not in ("latest", "daily", "weekly", "monthly"):
            raise ValueError(f"Unknown Zenn order: {v}")
        return v


class NoteConfig(BaseModel):
    """note.com search API settings."""

    api_base: str = Field("https://note.com/api/v3")
    keywords: List[str] = Field(
        default_factory=lambda: [
            "プログラミング",
            "エンジニア",
            "Web開発",
            "React",
            "Next.js",
            "TypeScript",
            "フロントエンド",
            "バックエンド",
            "AI",
            "ChatGPT",
        ]
    )
    max_keywords: int = Field(6, ge=1, description="Keywords actually queried per run")
    size: int = Field(50, ge=1, description="Results per keyword, capped at 50")
    request_delay: float = Field(0.5, ge=0.0, description="Seconds between keyword queries")
    blocked_authors: List[str] = Field(default_factory=lambda: ["enginner_skill"])


class HatenaConfig(BaseModel):
    """Hatena Blog RSS settings."""

    feeds: List[str] = Field(
        default_factory=lambda: [
            "https://developer.hatenastaff.com/rss",
            "https://devblog.thebase.in/rss",
            "https://engineering.mercari.com/blog/feed.xml",
            "https://tech.smarthr.jp/rss",
            "https://blog.cybozu.io/rss",
            "https://tech.gunosy.io/rss",
            "https://techlife.cookpad.com/rss",
        ]
    )
    limit: int = Field(50, ge=1, description="Entries kept after merging all feeds")
    blog_names: Dict[str, str] = Field(
        default_factory=lambda: {
            "developer.hatenastaff.com": "Hatena Developer Blog",
            "devblog.thebase.in": "BASE",
            "techblog.yahoo.co.jp": "Yahoo! JAPAN",
            "engineering.mercari.com": "Mercari",
            "tech.smarthr.jp": "SmartHR",
            "blog.cybozu.io": "Cybozu",
            "tech.gunosy.io": "Gunosy",
            "techlife.cookpad.com": "Cookpad",
            "tech.pepabo.com": "Pepabo",
            "zozotech-inc.github.io": "ZOZO",
        }
    )


class SourcesConfig(BaseModel):
    """Per-platform adapter settings."""

    qiita: QiitaConfig = Field(default_factory=QiitaConfig)
    zenn: ZennConfig = Field(default_factory=ZennConfig)
    note: NoteConfig = Field(default_factory=NoteConfig)
    hatena: HatenaConfig = Field(default_factory=HatenaConfig)


class CollectionConfig(BaseModel):
    """Collection cycle settings."""

    timeout_seconds: float = Field(60.0, gt=0, description="Wall-clock budget for one cycle")
    http_timeout: float = Field(30.0, gt=0, description="Per-request timeout")


class LiveConfig(BaseModel):
    """Live aggregation settings."""

    sources: List[str] = Field(default_factory=lambda: ["qiita", "zenn"])
    timeout_seconds: float = Field(20.0, gt=0)
    default_period: Period = Field(Period.THREE_DAYS, description="Window when a live request sets none")


class QueryConfig(BaseModel):
    """Query defaults."""

    default_limit: int = Field(12, ge=1, le=100)


class LLMConfig(BaseModel):
    """LLM provider configuration."""

    provider: str = Field("openai", description="LLM provider (openai, mock)")
    model: str = Field("gpt-4o-mini", description="Model name")
    api_key_env: Optional[str] = Field("OPENAI_API_KEY", description="Environment variable for API key")
    api_key: Optional[str] = Field(None, description="API key (prefer api_key_env)")
    base_url: Optional[str] = Field(None, description="Base URL for API")


class ConfigModel(BaseModel):
    """Main configuration model."""

    postgres: PostgresConfig = Field(default_factory=PostgresConfig)
    sources: SourcesConfig = Field(default_factory=SourcesConfig)
    collection: CollectionConfig = Field(default_factory=CollectionConfig)
    live: LiveConfig = Field(default_factory=LiveConfig)
    query: QueryConfig = Field(default_factory=QueryConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
