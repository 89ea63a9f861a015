from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Literal, Union


# Inputs shared by the plan endpoints
class WaypointModel(BaseModel):
    id: str
    distance: float = Field(..., ge=0, description="Distance depuis le depart (m)")
    order: int = Field(..., ge=0, description="0 = depart, max = arrivee")


class PlanModel(BaseModel):
    pace: Optional[Union[float, str]] = Field(None, description="Secondes par unite (km ou mile) ou \"M:SS\"")
    pace_unit: Literal["per_km", "per_mile", "min_per_km", "min_per_mi"] = "per_km"
    pace_mode: Literal["pace", "normalized", "time"] = "pace"
    target_time_seconds: Optional[float] = None
    pacing_strategy: Literal["flat", "linear"] = "flat"
    pacing_linear_percent: float = Field(0.0, ge=-50, le=50)
    grade_adjustment: bool = True


class SamplingModel(BaseModel):
    sample_step_meters: Optional[float] = Field(None, ge=0)
    grade_window_meters: Optional[float] = Field(None, ge=0)


class PlanAnalyzeRequest(BaseModel):
    profile_id: Optional[str] = Field(None, description="Id renvoye par POST /course/profile")
    geometries: Optional[List[List[List[Optional[float]]]]] = Field(
        None, description="Geometries [[lat, lng, elevation?], ...]"
    )
    geojson: Optional[dict] = None
    plan: PlanModel
    waypoints: List[WaypointModel] = Field(default_factory=list)
    stoppage_overrides: Dict[str, float] = Field(default_factory=dict)
    default_stoppage_seconds: float = Field(0.0, ge=0)
    sampling: Optional[SamplingModel] = None
    smoothing_meters: float = Field(0.0, ge=0)


class PaceAtRequest(PlanAnalyzeRequest):
    distance_m: float


# POST /course/profile - Response
class ProfilePoint(BaseModel):
    distance: float
    elevation: float
    lat: float
    lng: float


class TransformStepModel(BaseModel):
    name: str
    points_in: int
    points_out: int
    reason: str
    details: Optional[dict] = None


class CourseProfileResponse(BaseModel):
    id: str = Field(..., description="sha256 du fichier GPX")
    name: str
    total_distance_m: float
    has_elevation: bool
    stats: Dict[str, float]
    points: List[ProfilePoint]
    transform: List[TransformStepModel]


# POST /plan/analyze - Response
class PlanAnalyzeResponse(BaseModel):
    splits: List[dict]
    series: List[dict]
    segments: List[dict]
    waypoint_times: Dict[str, int]
    scales: dict
    summary: dict
    comparison: Optional[dict] = None


# POST /plan/pace-at - Response
class PaceAtResponse(BaseModel):
    distance: float
    predicted_pace: Optional[float] = None
    grade_percent: float
    lat: Optional[float] = None
    lng: Optional[float] = None
    elevation: Optional[float] = None
