"""
Pydantic models for the printer vendor cloud task listing

Field aliases follow the cloud's camelCase JSON.
"""
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field


class AmsSlotUsage(BaseModel):
    """Filament drawn from one AMS slot during a task"""
    model_config = ConfigDict(populate_by_name=True)

    ams: int = 0
    ams_id: int = Field(0, alias="amsId")
    slot_id: int = Field(0, alias="slotId")
    source_color: str = Field("", alias="sourceColor")
    filament_type: str = Field("", alias="filamentType")
    weight: float = 0.0


class PrintTask(BaseModel):
    """One print job as reported by the cloud"""
    model_config = ConfigDict(populate_by_name=True)

    id: int
    title: str = ""
    cover: str = ""
    status: int = 0
    start_time: str = Field("", alias="startTime")
    end_time: Optional[str] = Field(None, alias="endTime")
    weight: float = 0.0
    length: float = 0.0
    cost_time: int = Field(0, alias="costTime", description="Seconds")
    device_id: str = Field("", alias="deviceId")
    device_name: str = Field("", alias="deviceName")
    device_model: str = Field("", alias="deviceModel")
    ams_detail_mapping: List[AmsSlotUsage] = Field(default_factory=list, alias="amsDetailMapping")

    @property
    def formatted_print_time(self) -> str:
        hours, rest = divmod(self.cost_time, 3600)
        minutes = rest // 60
        if hours > 0:
            return f"{hours}h {minutes}m"
        return f"{minutes}m"

    @property
    def material_type(self) -> str:
        if self.ams_detail_mapping:
            return self.ams_detail_mapping[0].filament_type
        return "Unknown"


class PrintTaskList(BaseModel):
    total: int = 0
    hits: List[PrintTask] = []


class PrinterStatusResponse(BaseModel):
    enabled: bool
    observed_print_count: Optional[int] = None
    tasks: List[PrintTask] = []


class TaskRecordRequest(BaseModel):
    """Spools the task drew from, in AMS slot order"""
    material_ids: List[str] = Field(..., min_length=1)
