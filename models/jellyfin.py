from pydantic import BaseModel, Field


class VirtualFolderInfo(BaseModel):
    """Jellyfin 媒体库模型"""
    Name: str
    ItemId: str
    CollectionType: str | None = None
    Locations: list[str] = Field(default_factory=list)

class MediaStream(BaseModel):
    """Jellyfin 媒体流模型"""
    Type: str
    Index: int | None = None
    Codec: str | None = None
    Language: str | None = None
    DisplayTitle: str | None = None
    IsDefault: bool = False
    IsExternal: bool = False

class UserItemDataDto(BaseModel):
    """Jellyfin 用户播放数据模型"""
    PlayedPercentage: float | None = None
    PlaybackPositionTicks: int | None = None
    Played: bool = False
    LastPlayedDate: str | None = None # datetime

class BaseItemDto(BaseModel):
    """Jellyfin 媒体项模型（仅保留同步所需字段）"""
    Id: str
    Name: str | None = None
    Type: str
    SeriesId: str | None = None
    SeriesName: str | None = None
    SeasonId: str | None = None
    IndexNumber: int | None = None
    ParentIndexNumber: int | None = None
    ProductionYear: int | None = None
    PremiereDate: str | None = None # datetime
    DateCreated: str | None = None # datetime
    ChildCount: int | None = None
    LocationType: str | None = None
    ProviderIds: dict[str, str | None] = Field(default_factory=dict)
    ImageTags: dict[str, str] = Field(default_factory=dict)
    MediaStreams: list[MediaStream] = Field(default_factory=list)
    UserData: UserItemDataDto | None = None

class BaseItemDtoQueryResult(BaseModel):
    """Jellyfin 媒体项查询结果"""
    Items: list[BaseItemDto] = Field(default_factory=list)
    TotalRecordCount: int
    StartIndex: int = 0
