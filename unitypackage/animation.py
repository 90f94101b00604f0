"""
Float-curve editing for Unity AnimationClip (.anim) files.

An .anim file is a Unity YAML document whose `AnimationClip:` block holds
many curve families. Only float curves are modeled here. Everything else in
the block is kept as a parsed baseline and written back as-is; everything
outside the block is passed through byte for byte.

Position, rotation, scale, compressed rotation, euler and PPtr curves are
not supported and are passed through untouched.

Example:
    anim = UnityAnimation(asset.read_text())
    anim.add_keyframe("material._MainTex_ST.x", "", Keyframe(time=0.5, value=2.0))
    pkg.update_asset_data(asset.asset_path, anim.export_to_yaml().encode("utf-8"))
"""

import logging
import math
import re
import textwrap
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field

from .constants import PackageConstants
from .errors import DecodeError
from .utils.yaml_utils import YamlUtils

logger = logging.getLogger(__name__)


ANIMATION_CLIP_PATTERN = re.compile(r"AnimationClip:(.*?)(?=\n\S|\Z)", re.DOTALL)

UNSUPPORTED_CURVE_FIELDS = (
    "m_RotationCurves",
    "m_CompressedRotationCurves",
    "m_EulerCurves",
    "m_PositionCurves",
    "m_ScaleCurves",
    "m_PPtrCurves",
)


class Keyframe(BaseModel):
    """A single sample of a float curve."""

    time: float = Field(0.0, description="Time in seconds")
    value: float = Field(0.0, description="Curve value at this time")
    in_slope: float = Field(0.0, description="Incoming tangent (may be +/-inf)")
    out_slope: float = Field(0.0, description="Outgoing tangent (may be +/-inf)")
    tangent_mode: int = Field(0, description="Unity tangent mode flags")
    weighted_mode: int = Field(0, description="Unity weighted mode")
    in_weight: float = Field(PackageConstants.DEFAULT_KEYFRAME_WEIGHT, description="Incoming tangent weight")
    out_weight: float = Field(PackageConstants.DEFAULT_KEYFRAME_WEIGHT, description="Outgoing tangent weight")


class FloatCurve(BaseModel):
    """A scalar animated property, identified by (attribute, path)."""

    attribute: str = Field(..., description="Animated property, e.g. 'material._MainTex_ST.x'")
    path: str = Field("", description="Transform path of the animated object ('' = root)")
    class_id: int = Field(0, description="Unity class ID of the animated component")
    keyframes: List[Keyframe] = Field(default_factory=list, description="Keyframes sorted by time")


class UnityAnimation:
    """Editor for the float curves of an AnimationClip document."""

    def __init__(self, yaml_content: str):
        """Parse an .anim document.

        Args:
            yaml_content: Full text of the .anim file

        Raises:
            DecodeError: If no AnimationClip block exists or it cannot be parsed
        """
        self._original_yaml = yaml_content
        match = self._find_clip_block()

        try:
            parsed = YamlUtils.load(textwrap.dedent(match.group(1)))
        except yaml.YAMLError as err:
            raise DecodeError(f"Failed to parse AnimationClip YAML: {err}") from err
        if not isinstance(parsed, dict):
            raise DecodeError("AnimationClip block is not a mapping")

        self._baseline: Dict[str, Any] = parsed
        name = parsed.get("m_Name")
        self._name = "" if name is None else str(name)
        self._float_curves = self._parse_float_curves(parsed.get("m_FloatCurves"))

        if self.unsupported_curve_fields:
            logger.warning(
                "AnimationClip '%s' contains unsupported curves %s; they are passed through unchanged",
                self._name, self.unsupported_curve_fields,
            )

    # ============================================================
    # Name and curve access
    # ============================================================

    def get_name(self) -> str:
        return self._name

    def set_name(self, name: str) -> None:
        self._name = name

    def get_float_curves(self) -> List[FloatCurve]:
        return self._float_curves

    def get_curve(self, attribute: str, path: str) -> Optional[FloatCurve]:
        """Get the float curve for (attribute, path), or None if absent."""
        for curve in self._float_curves:
            if curve.attribute == attribute and curve.path == path:
                return curve
        return None

    @property
    def unsupported_curve_fields(self) -> List[str]:
        """Names of non-empty curve families this editor does not model."""
        return [name for name in UNSUPPORTED_CURVE_FIELDS if self._baseline.get(name)]

    # ============================================================
    # Curve editing
    # ============================================================

    def add_curve(self, curve: FloatCurve) -> None:
        """Add a curve, or replace the keyframes of the curve with the same (attribute, path)."""
        existing = self.get_curve(curve.attribute, curve.path)
        if existing is not None:
            existing.keyframes = curve.keyframes
        else:
            self._float_curves.append(curve)

    def remove_curve(self, attribute: str, path: str) -> None:
        self._float_curves = [
            c for c in self._float_curves
            if not (c.attribute == attribute and c.path == path)
        ]

    def add_keyframe(self, attribute: str, path: str, keyframe: Keyframe) -> None:
        """Insert a keyframe, keeping the curve sorted by time. No-op if the curve is absent."""
        curve = self.get_curve(attribute, path)
        if curve is None:
            return
        curve.keyframes.append(keyframe)
        curve.keyframes.sort(key=lambda kf: kf.time)

    def remove_keyframe(self, attribute: str, path: str, time: float) -> None:
        """Remove keyframes within the keyframe time tolerance of `time`. No-op if the curve is absent."""
        curve = self.get_curve(attribute, path)
        if curve is None:
            return
        curve.keyframes = [
            kf for kf in curve.keyframes
            if abs(kf.time - time) > PackageConstants.KEYFRAME_TIME_TOLERANCE
        ]

    # ============================================================
    # Export
    # ============================================================

    def export_to_yaml(self) -> str:
        """Rebuild the document with the current name and float curves.

        Editor curves, generic bindings and the clip start/stop time are
        recomputed from the float curves. Text outside the AnimationClip
        block is returned unchanged.
        """
        match = self._find_clip_block()

        self._sync_editor_curves()
        self._update_clip_binding_constant()
        self._update_clip_settings()

        updated = dict(self._baseline)
        updated["m_Name"] = self._name
        updated["m_FloatCurves"] = [self._curve_to_yaml(c) for c in self._float_curves]

        dumped = YamlUtils.dump(updated, PackageConstants.YAML_LINE_WIDTH)
        body = "\n".join("  " + line if line else line for line in dumped.rstrip("\n").split("\n"))

        block = match.group(1)
        trailing = block[len(block.rstrip()):]
        return (
            self._original_yaml[:match.start()]
            + "AnimationClip:\n"
            + body
            + trailing
            + self._original_yaml[match.end():]
        )

    def _find_clip_block(self) -> re.Match:
        match = ANIMATION_CLIP_PATTERN.search(self._original_yaml)
        if match is None:
            raise DecodeError("AnimationClip not found in YAML")
        return match

    def _sync_editor_curves(self) -> None:
        self._baseline["m_EditorCurves"] = [self._curve_to_yaml(c) for c in self._float_curves]

    def _update_clip_binding_constant(self) -> None:
        binding_constant = self._baseline.get("m_ClipBindingConstant")
        if not isinstance(binding_constant, dict):
            binding_constant = {"genericBindings": [], "pptrCurveMapping": []}
            self._baseline["m_ClipBindingConstant"] = binding_constant

        binding_constant["genericBindings"] = [
            {
                "serializedVersion": 2,
                "path": curve.path,
                "attribute": curve.attribute,
                "script": {"fileID": 0},
                "typeID": curve.class_id,
                "customType": 22,
                "isPPtrCurve": 0,
                "isIntCurve": 0,
                "isSerializeReferenceCurve": 0,
            }
            for curve in self._float_curves
        ]

    def _update_clip_settings(self) -> None:
        settings = self._baseline.get("m_AnimationClipSettings")
        if not isinstance(settings, dict):
            settings = {}
            self._baseline["m_AnimationClipSettings"] = settings

        times = [kf.time for curve in self._float_curves for kf in curve.keyframes]
        # With no keyframes the previous start/stop times are kept as they were
        if times:
            settings["m_StartTime"] = min(times)
            settings["m_StopTime"] = max(times)

    @staticmethod
    def _curve_to_yaml(curve: FloatCurve) -> Dict[str, Any]:
        return {
            "serializedVersion": 2,
            "curve": {
                "serializedVersion": 2,
                "m_Curve": [
                    {
                        "serializedVersion": 3,
                        "time": kf.time,
                        "value": kf.value,
                        "inSlope": _format_slope(kf.in_slope),
                        "outSlope": _format_slope(kf.out_slope),
                        "tangentMode": kf.tangent_mode,
                        "weightedMode": kf.weighted_mode,
                        "inWeight": kf.in_weight,
                        "outWeight": kf.out_weight,
                    }
                    for kf in curve.keyframes
                ],
                "m_PreInfinity": 2,
                "m_PostInfinity": 2,
                "m_RotationOrder": 4,
            },
            "attribute": curve.attribute,
            "path": curve.path,
            "classID": curve.class_id,
            "script": {"fileID": 0},
            "flags": 16,
        }

    @staticmethod
    def _parse_float_curves(data: Any) -> List[FloatCurve]:
        if not isinstance(data, list):
            return []

        curves = []
        for entry in data:
            if not isinstance(entry, dict):
                entry = {}
            curve_data = entry.get("curve")
            frames = curve_data.get("m_Curve") if isinstance(curve_data, dict) else None
            curves.append(FloatCurve(
                attribute=_as_str(entry.get("attribute")),
                path=_as_str(entry.get("path")),
                class_id=_as_int(entry.get("classID")),
                keyframes=[
                    Keyframe(
                        time=_as_float(kf.get("time")),
                        value=_as_float(kf.get("value")),
                        in_slope=_parse_slope(kf.get("inSlope")),
                        out_slope=_parse_slope(kf.get("outSlope")),
                        tangent_mode=_as_int(kf.get("tangentMode")),
                        weighted_mode=_as_int(kf.get("weightedMode")),
                        in_weight=_as_float(kf.get("inWeight"), PackageConstants.DEFAULT_KEYFRAME_WEIGHT),
                        out_weight=_as_float(kf.get("outWeight"), PackageConstants.DEFAULT_KEYFRAME_WEIGHT),
                    )
                    for kf in (frames if isinstance(frames, list) else [])
                    if isinstance(kf, dict)
                ],
            ))
        return curves


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_float(value: Any, default: float = 0.0) -> float:
    return float(value) if _is_number(value) else default


def _as_int(value: Any) -> int:
    return int(value) if _is_number(value) else 0


def _as_str(value: Any) -> str:
    return "" if value is None else str(value)


def _parse_slope(value: Any) -> float:
    """Slopes are numbers or the Unity tokens 'Infinity' / '-Infinity'."""
    if _is_number(value):
        return float(value)
    if value == "Infinity":
        return math.inf
    if value == "-Infinity":
        return -math.inf
    return 0.0


def _format_slope(value: float) -> Any:
    if value == math.inf:
        return "Infinity"
    if value == -math.inf:
        return "-Infinity"
    return value
