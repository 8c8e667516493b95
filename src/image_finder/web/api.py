"""FastAPI web interface for image-finder."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from image_finder import __version__
from image_finder.config import get_default_config
from image_finder.image_search.criteria import FilterCriteria
from image_finder.image_search.errors import InvalidCriteriaError
from image_finder.image_search.finder import ImageFinder, SearchContext
from image_finder.image_search.metadata_store import SqliteSidecarStore
from image_finder.image_search.sidecar_store import StreamSidecarStore

logger = logging.getLogger(__name__)

app = FastAPI(
    title="image-finder API",
    description="Search images by their AI generated metadata",
    version=__version__,
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global state
config = get_default_config()

# Pydantic models for request/response

CRITERIA_FIELDS = (
    "keywords", "people", "objects", "scenes", "picture_type", "style_type",
    "overall_mood", "description_search", "any", "has_nudity", "no_nudity",
    "has_explicit_content", "no_explicit_content", "meta_camera_make",
    "meta_camera_model", "meta_width", "meta_height", "meta_gps_latitude",
    "meta_gps_longitude", "meta_gps_altitude", "meta_exposure_time",
    "meta_f_number", "meta_iso", "meta_focal_length", "meta_date_taken",
    "geo_location", "geo_distance_in_meters", "min_confidence_ratio",
)


class FindRequest(BaseModel):
    image_directories: Optional[List[str]] = Field(None, description="Directories to search (default: configured)")
    paths: List[str] = Field(default_factory=list, description="Explicit image paths")
    language: Optional[str] = Field(None, description="Description language")
    recursive: Optional[bool] = Field(None, description="Scan subdirectories")
    use_index: Optional[bool] = Field(None, description="Search the SQLite index")
    max_workers: Optional[int] = Field(None, description="Worker threads")

    keywords: List[str] = Field(default_factory=list)
    people: List[str] = Field(default_factory=list)
    objects: List[str] = Field(default_factory=list)
    scenes: List[str] = Field(default_factory=list)
    picture_type: List[str] = Field(default_factory=list)
    style_type: List[str] = Field(default_factory=list)
    overall_mood: List[str] = Field(default_factory=list)
    description_search: List[str] = Field(default_factory=list)
    any: List[str] = Field(default_factory=list, description="Terms matched against every field")
    has_nudity: bool = False
    no_nudity: bool = False
    has_explicit_content: bool = False
    no_explicit_content: bool = False
    meta_camera_make: List[str] = Field(default_factory=list)
    meta_camera_model: List[str] = Field(default_factory=list)
    meta_width: Optional[List[int]] = Field(None, description="[value] or [min, max]")
    meta_height: Optional[List[int]] = None
    meta_gps_latitude: Optional[List[float]] = None
    meta_gps_longitude: Optional[List[float]] = None
    meta_gps_altitude: Optional[List[float]] = None
    meta_exposure_time: Optional[List[float]] = None
    meta_f_number: Optional[List[float]] = None
    meta_iso: Optional[List[int]] = None
    meta_focal_length: Optional[List[float]] = None
    meta_date_taken: Optional[List[datetime]] = None
    geo_location: Optional[List[float]] = Field(None, description="[latitude, longitude]")
    geo_distance_in_meters: float = 1000.0
    min_confidence_ratio: Optional[float] = None


class FindResponse(BaseModel):
    results: List[Dict[str, Any]]
    total: int


@app.post("/api/find", response_model=FindResponse)
def find_images(request: FindRequest):
    """Find images matching the request filters."""
    values = request.model_dump()
    try:
        if values["geo_location"] is not None and len(values["geo_location"]) != 2:
            raise InvalidCriteriaError("geo_location must be [latitude, longitude]")
        criteria = FilterCriteria(**{name: values[name] for name in CRITERIA_FIELDS})
        criteria.validate()
    except InvalidCriteriaError as e:
        raise HTTPException(status_code=400, detail=str(e))

    use_index = config.use_index if request.use_index is None else request.use_index
    context = SearchContext(
        image_directories=request.image_directories or list(config.image_directories),
        paths=request.paths,
        language=config.get_language(request.language),
        recursive=config.recursive if request.recursive is None else request.recursive,
        max_workers=request.max_workers or config.max_workers,
        use_index=use_index,
    )
    store = SqliteSidecarStore(config.index_path) if use_index else StreamSidecarStore()

    try:
        results = ImageFinder(store=store).find(criteria, context)
    except Exception as e:
        logger.error(f"Search failed: {e}")
        raise HTTPException(status_code=500, detail="An internal error occurred while searching images.")

    return FindResponse(results=[item.to_dict() for item in results], total=len(results))


@app.get("/api/config")
def get_config():
    """Current configuration."""
    return config.to_dict()


@app.get("/api/health")
async def health_check():
    return {"status": "ok", "version": __version__}
