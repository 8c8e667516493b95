"""Data models for image metadata and search results."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Dict, Any
from pathlib import Path

UNKNOWN_SCENE = "unknown"


def _pick(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key, accepting both naming styles."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _as_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _as_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


_TRUE_STRINGS = ("true", "yes", "1")
_FALSE_STRINGS = ("false", "no", "0", "")


def _as_bool(value: Any) -> bool:
    """Read a sidecar flag; strings such as ``"false"`` are not truthy."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    raise ValueError(f"Not a boolean flag: {value!r}")


def parse_date_taken(value: Any) -> Optional[datetime]:
    """Parse an EXIF (``YYYY:MM:DD HH:MM:SS``) or ISO timestamp."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip().rstrip("\x00")
    try:
        return datetime.strptime(text, "%Y:%m:%d %H:%M:%S")
    except ValueError:
        return datetime.fromisoformat(text)


@dataclass
class Prediction:
    """A single labelled detection with its model confidence."""
    label: str
    confidence: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {"Label": self.label, "Confidence": self.confidence}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Prediction":
        return cls(
            label=str(_pick(data, "Label", "label", "userid", "name", default="")),
            confidence=float(_pick(data, "Confidence", "confidence", default=0.0)),
        )


@dataclass
class Description:
    """AI generated description of an image."""
    short_description: str = ""
    long_description: str = ""
    keywords: List[str] = field(default_factory=list)
    picture_type: Optional[str] = None
    style_type: Optional[str] = None
    overall_mood: Optional[str] = None
    has_nudity: bool = False
    has_explicit_content: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ShortDescription": self.short_description,
            "LongDescription": self.long_description,
            "Keywords": list(self.keywords),
            "PictureType": self.picture_type,
            "StyleType": self.style_type,
            "OverallMood": self.overall_mood,
            "HasNudity": self.has_nudity,
            "HasExplicitContent": self.has_explicit_content,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Description":
        keywords = _pick(data, "Keywords", "keywords", default=[])
        if isinstance(keywords, str):
            keywords = [keywords]
        return cls(
            short_description=str(_pick(data, "ShortDescription", "short_description", default="")),
            long_description=str(_pick(data, "LongDescription", "long_description", default="")),
            keywords=[str(k) for k in keywords],
            picture_type=_pick(data, "PictureType", "picture_type"),
            style_type=_pick(data, "StyleType", "style_type"),
            overall_mood=_pick(data, "OverallMood", "overall_mood"),
            has_nudity=_as_bool(_pick(data, "HasNudity", "has_nudity", default=False)),
            has_explicit_content=_as_bool(
                _pick(data, "HasExplicitContent", "has_explicit_content", default=False)
            ),
        )


@dataclass
class People:
    """Recognized faces in an image."""
    count: int = 0
    faces: List[str] = field(default_factory=list)
    predictions: List[Prediction] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Count": self.count,
            "Faces": list(self.faces),
            "Predictions": [p.to_dict() for p in self.predictions],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "People":
        predictions = [
            Prediction.from_dict(p) for p in _pick(data, "Predictions", "predictions", default=[])
        ]
        faces = [str(f) for f in _pick(data, "Faces", "faces", default=[])]
        if not faces and predictions:
            faces = [p.label for p in predictions]
        count = _pick(data, "Count", "count")
        return cls(
            count=int(count) if count is not None else len(faces),
            faces=faces,
            predictions=predictions,
        )


@dataclass
class Objects:
    """Detected objects in an image."""
    count: int = 0
    objects: List[Prediction] = field(default_factory=list)
    object_counts: Dict[str, int] = field(default_factory=dict)

    @property
    def labels(self) -> List[str]:
        return [o.label for o in self.objects]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Count": self.count,
            "Objects": [o.to_dict() for o in self.objects],
            "ObjectCounts": dict(self.object_counts),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Objects":
        detections = _pick(data, "Objects", "objects", "predictions", default=[])
        objects = [Prediction.from_dict(o) for o in detections]
        counts = _pick(data, "ObjectCounts", "object_counts", default=None)
        if counts is None:
            counts = count_labels(objects)
        count = _pick(data, "Count", "count")
        return cls(
            count=int(count) if count is not None else len(objects),
            objects=objects,
            object_counts={str(k): int(v) for k, v in counts.items()},
        )


@dataclass
class Scenes:
    """Scene classification of an image."""
    success: bool = False
    scene: str = UNKNOWN_SCENE
    confidence: float = 0.0

    @property
    def is_unknown(self) -> bool:
        return not self.scene or self.scene.lower() == UNKNOWN_SCENE

    def to_dict(self) -> Dict[str, Any]:
        return {"Success": self.success, "Scene": self.scene, "Confidence": self.confidence}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Scenes":
        return cls(
            success=_as_bool(_pick(data, "Success", "success", default=False)),
            scene=str(_pick(data, "Scene", "scene", "label", default=UNKNOWN_SCENE)),
            confidence=float(_pick(data, "Confidence", "confidence", default=0.0)),
        )


@dataclass
class Camera:
    make: Optional[str] = None
    model: Optional[str] = None


@dataclass
class GPS:
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    altitude: Optional[float] = None

    @property
    def has_position(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass
class ExifData:
    """EXIF metadata in the layout produced by the extractor."""
    width: Optional[int] = None
    height: Optional[int] = None
    file_name: Optional[str] = None
    format: Optional[str] = None
    file_extension: Optional[str] = None
    camera: Camera = field(default_factory=Camera)
    gps: Optional[GPS] = None
    software: Optional[str] = None
    exposure_time: Optional[float] = None
    f_number: Optional[float] = None
    iso: Optional[int] = None
    focal_length: Optional[float] = None
    date_taken: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the EXIF cache layout."""
        gps = None
        if self.gps is not None:
            gps = {
                "Latitude": self.gps.latitude,
                "Longitude": self.gps.longitude,
                "Altitude": self.gps.altitude,
            }
        return {
            "Basic": {
                "Width": self.width,
                "Height": self.height,
                "FileName": self.file_name,
                "Format": self.format,
                "FileExtension": self.file_extension,
            },
            "Camera": {"Make": self.camera.make, "Model": self.camera.model},
            "GPS": gps,
            "Other": {"Software": self.software},
            "ExposureTime": self.exposure_time,
            "FNumber": self.f_number,
            "ISO": self.iso,
            "FocalLength": self.focal_length,
            "DateTaken": self.date_taken.isoformat() if self.date_taken else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExifData":
        basic = data.get("Basic") or {}
        camera = data.get("Camera") or {}
        other = data.get("Other") or {}
        gps_data = data.get("GPS")
        gps = None
        if gps_data:
            gps = GPS(
                latitude=_as_float(gps_data.get("Latitude")),
                longitude=_as_float(gps_data.get("Longitude")),
                altitude=_as_float(gps_data.get("Altitude")),
            )
        return cls(
            width=_as_int(basic.get("Width")),
            height=_as_int(basic.get("Height")),
            file_name=basic.get("FileName"),
            format=basic.get("Format"),
            file_extension=basic.get("FileExtension"),
            camera=Camera(make=camera.get("Make"), model=camera.get("Model")),
            gps=gps,
            software=other.get("Software"),
            exposure_time=_as_float(data.get("ExposureTime")),
            f_number=_as_float(data.get("FNumber")),
            iso=_as_int(data.get("ISO")),
            focal_length=_as_float(data.get("FocalLength")),
            date_taken=parse_date_taken(data.get("DateTaken")),
        )


@dataclass
class MediaItem:
    """One image file together with its sidecar metadata."""
    path: str
    width: Optional[int] = None
    height: Optional[int] = None
    description: Optional[Description] = None
    people: People = field(default_factory=People)
    objects: Objects = field(default_factory=Objects)
    scenes: Scenes = field(default_factory=Scenes)
    exif: Optional[ExifData] = None

    @property
    def filename(self) -> str:
        return Path(self.path).name

    @property
    def directory(self) -> str:
        """Get directory containing the image."""
        return str(Path(self.path).parent)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for output."""
        return {
            "path": self.path,
            "filename": self.filename,
            "width": self.width,
            "height": self.height,
            "description": self.description.to_dict() if self.description else None,
            "people": self.people.to_dict(),
            "objects": self.objects.to_dict(),
            "scenes": self.scenes.to_dict(),
            "exif": self.exif.to_dict() if self.exif else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MediaItem":
        """Create from dictionary."""
        description = data.get("description")
        people = data.get("people")
        objects = data.get("objects")
        scenes = data.get("scenes")
        exif = data.get("exif")
        return cls(
            path=data["path"],
            width=data.get("width"),
            height=data.get("height"),
            description=Description.from_dict(description) if description else None,
            people=People.from_dict(people) if people else People(),
            objects=Objects.from_dict(objects) if objects else Objects(),
            scenes=Scenes.from_dict(scenes) if scenes else Scenes(),
            exif=ExifData.from_dict(exif) if exif else None,
        )


def count_labels(predictions: List[Prediction]) -> Dict[str, int]:
    """Count detections per label."""
    counts: Dict[str, int] = {}
    for prediction in predictions:
        counts[prediction.label] = counts.get(prediction.label, 0) + 1
    return counts
