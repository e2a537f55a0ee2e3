import json

import pytest

from bellows_models import DeformationState, JointType
from joint_catalog import apply_capabilities, get_joint_config, load_catalog, status_indicators


def test_builtin_capabilities():
    axial = get_joint_config(JointType.AXIAL).allowed_deformation
    assert (axial.axial, axial.lateral, axial.angular) == (True, False, False)
    universal = get_joint_config(JointType.UNIVERSAL).allowed_deformation
    assert (universal.axial, universal.lateral, universal.angular) == (True, True, False)
    for joint_type in (JointType.HINGED, JointType.GIMBAL):
        allowed = get_joint_config(joint_type).allowed_deformation
        assert (allowed.axial, allowed.lateral, allowed.angular) == (False, False, True)


def test_pressure_balanced_has_no_entry():
    with pytest.raises(KeyError):
        get_joint_config(JointType.PRESSURE_BALANCED)


def test_apply_capabilities():
    state = DeformationState(axial=20.0, lateral=30.0, angular=5.0, pressure=10.0,
                             cross_section=False)
    masked = apply_capabilities(state, get_joint_config(JointType.UNIVERSAL))
    assert masked == DeformationState(axial=20.0, lateral=30.0, angular=0.0, pressure=10.0,
                                      cross_section=False)


def test_load_catalog(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps([
        {
            "id": "hinged",
            "name": "Hinged (tied)",
            "allowed_deformation": {"angular": True, "lateral": True},
            "features": ["Tie rods"],
        },
    ]))
    catalog = load_catalog(str(path))
    joint = get_joint_config(JointType.HINGED, catalog)
    assert joint.name == "Hinged (tied)"
    assert joint.description == ""
    assert joint.allowed_deformation.lateral
    assert not joint.allowed_deformation.axial
    assert joint.features == ["Tie rods"]
    with pytest.raises(KeyError):
        get_joint_config(JointType.AXIAL, catalog)


def test_load_catalog_rejects_unknown_type(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps([{"id": "slip", "name": "Slip"}]))
    with pytest.raises(ValueError):
        load_catalog(str(path))


def test_status_indicators():
    assert status_indicators(DeformationState()) == {
        "axial_load": False, "shear": False, "high_pressure": False,
    }
    flags = status_indicators(DeformationState(axial=-5.0, lateral=1.0, pressure=25.0))
    assert flags == {"axial_load": True, "shear": True, "high_pressure": True}
    assert not status_indicators(DeformationState(pressure=20.0))["high_pressure"]
