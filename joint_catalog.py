#!/usr/bin/env python3
"""
JOINT_CATALOG.PY - Static expansion joint catalog

Contains:
- AllowedDeformation, JointConfig: catalog records
- JOINT_DATA: built-in catalog
- get_joint_config / load_catalog: lookup and JSON loading
- apply_capabilities: zero deformation fields a joint cannot take
- status_indicators / status_line: load flags shown under the drawing
"""

import json
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from bellows_models import DeformationState, JointType


@dataclass(frozen=True)
class AllowedDeformation:
    axial: bool = False     # compression / extension
    lateral: bool = False   # offset
    angular: bool = False   # rotation


@dataclass(frozen=True)
class JointConfig:
    """One catalog entry."""
    id: JointType
    name: str
    description: str
    allowed_deformation: AllowedDeformation
    features: List[str] = field(default_factory=list)


JOINT_DATA: List[JointConfig] = [
    JointConfig(
        id=JointType.AXIAL,
        name="Single Axial",
        description="The simplest expansion joint. Absorbs axial movement "
                    "(compression and extension) of the pipe section it is "
                    "installed in.",
        allowed_deformation=AllowedDeformation(axial=True),
        features=["Low cost", "Simple design", "Needs main anchors",
                  "Cannot absorb lateral movement"],
    ),
    JointConfig(
        id=JointType.UNIVERSAL,
        name="Universal",
        description="Two bellows joined by a centre spool. Absorbs large "
                    "lateral deflection as well as axial movement.",
        allowed_deformation=AllowedDeformation(axial=True, lateral=True),
        features=["Large lateral movement", "Absorbs axial movement",
                  "Tie rods can carry pressure thrust"],
    ),
    JointConfig(
        id=JointType.HINGED,
        name="Hinged",
        description="Single bellows with a pair of hinge pins on hinge "
                    "plates, allowing angular rotation in one plane only.",
        allowed_deformation=AllowedDeformation(angular=True),
        features=["Angular rotation", "Carries pressure thrust",
                  "Usually used in pairs or sets"],
    ),
    JointConfig(
        id=JointType.GIMBAL,
        name="Gimbal",
        description="Two pairs of hinges on a common floating gimbal ring "
                    "allow angular rotation in any plane.",
        allowed_deformation=AllowedDeformation(angular=True),
        features=["Multi-plane rotation", "Carries pressure thrust",
                  "Rugged construction"],
    ),
]


def get_joint_config(joint_type: JointType,
                     catalog: Optional[List[JointConfig]] = None) -> JointConfig:
    """Find the catalog entry for a joint type."""
    for joint in catalog if catalog is not None else JOINT_DATA:
        if joint.id is joint_type:
            return joint
    raise KeyError(f"No catalog entry for joint type {joint_type.value!r}")


def joint_config_from_dict(data: Dict) -> JointConfig:
    allowed = data.get('allowed_deformation', {})
    return JointConfig(
        id=JointType(data['id']),
        name=data['name'],
        description=data.get('description', ''),
        allowed_deformation=AllowedDeformation(
            axial=bool(allowed.get('axial', False)),
            lateral=bool(allowed.get('lateral', False)),
            angular=bool(allowed.get('angular', False)),
        ),
        features=list(data.get('features', [])),
    )


def load_catalog(json_path: str) -> List[JointConfig]:
    """Load a catalog from a JSON list of joint records."""
    with open(json_path, 'r') as f:
        data = json.load(f)
    return [joint_config_from_dict(entry) for entry in data]


def apply_capabilities(state: DeformationState, joint: JointConfig) -> DeformationState:
    """Zero the deformation fields the joint does not mechanically support."""
    allowed = joint.allowed_deformation
    return replace(
        state,
        axial=state.axial if allowed.axial else 0.0,
        lateral=state.lateral if allowed.lateral else 0.0,
        angular=state.angular if allowed.angular else 0.0,
    )


# Pressure above which the status line reports high pressure
HIGH_PRESSURE_BAR = 20.0


def status_indicators(state: DeformationState) -> Dict[str, bool]:
    """Load indicators shown under the drawing."""
    return {
        "axial_load": state.axial != 0,
        "shear": state.lateral != 0,
        "high_pressure": state.pressure > HIGH_PRESSURE_BAR,
    }


def status_line(state: DeformationState) -> str:
    flags = status_indicators(state)
    return (f"Axial load: {'ON' if flags['axial_load'] else 'off'}"
            f" | Shear: {'ON' if flags['shear'] else 'off'}"
            f" | Pressure: {'HIGH' if flags['high_pressure'] else 'normal'}")
