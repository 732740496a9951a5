from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FcmConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    project_id: str = ""
    access_token: Optional[str] = None
    timeout_s: float = Field(default=10.0, gt=0)


class FirestoreConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    project_id: str = ""
    database: str = "(default)"
    access_token: Optional[str] = None
    # Chats live in the Realtime Database when this is set.
    realtime_database_url: Optional[str] = None
    chats_collection: str = "chats"
    groups_collection: str = "groups"
    users_collection: str = "users"
    timeout_s: float = Field(default=10.0, gt=0)

    @field_validator("realtime_database_url")
    @classmethod
    def validate_realtime_url(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        if not v.startswith(("https://", "http://")):
            raise ValueError(f"realtime_database_url must be an http(s) URL, got: {v}")
        return v


class RedisConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    url: str = "redis://localhost:6379"
    stream: str = "bandsync:triggers"
    group: str = "notification-dispatch"
    consumer: Optional[str] = None


class ServerConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    host: str = "127.0.0.1"
    port: int = Field(default=8080, ge=1, le=65535)


class NotifierConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    fcm: FcmConfig = FcmConfig()
    firestore: FirestoreConfig = FirestoreConfig()
    redis: RedisConfig = RedisConfig()
    server: ServerConfig = ServerConfig()
