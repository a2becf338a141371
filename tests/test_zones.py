"""
Tests for zone lookup and painting packs.
"""

import json

import pytest

from pintura_sonora.mapping.painting_pack import (
    OBRA_BOSS,
    PaintingPack,
    Zone,
    ZoneRole,
    load_painting_pack,
    save_painting_pack,
)
from pintura_sonora.mapping.zones import find_zone
from pintura_sonora.utils.coords import Point

ZONES = [
    Zone("a", 0.3, 0.3, 0.1, ZoneRole.PAD),
    Zone("b", 0.7, 0.7, 0.2, ZoneRole.PERC),
]


def test_zone_center_resolves_to_zone():
    for zone in ZONES:
        assert find_zone(ZONES, zone.x, zone.y) is zone


def test_point_just_outside_every_zone_resolves_to_none():
    eps = 1e-6
    assert find_zone(ZONES, 0.3 + 0.1 + eps, 0.3) is None
    assert find_zone(ZONES, 0.7, 0.7 - 0.2 - eps) is None


def test_point_on_border_is_inside():
    assert find_zone(ZONES, 0.5, 0.7) is ZONES[1]


def test_zone_is_a_circle_not_a_box():
    zone = ZONES[0]

    # Both axes within r, but the diagonal distance is above it
    assert not zone.contains(0.3 + 0.071, 0.3 + 0.071)
    assert zone.contains(0.3 + 0.07, 0.3 + 0.07)
    assert Point(0.3, 0.3).distance_to(Point(0.33, 0.34)) == pytest.approx(0.05)


def test_overlapping_zones_first_match_wins():
    small = Zone("small", 0.5, 0.5, 0.05, ZoneRole.ACCENT)
    big = Zone("big", 0.5, 0.5, 0.4, ZoneRole.PAD)

    assert find_zone([small, big], 0.5, 0.5) is small
    assert find_zone([big, small], 0.5, 0.5) is big


def test_empty_zone_list():
    assert find_zone([], 0.5, 0.5) is None


def test_builtin_pack_zones():
    assert find_zone(OBRA_BOSS.zones, 0.52, 0.38).id == "meat"
    assert find_zone(OBRA_BOSS.zones, 0.18, 0.45).role is ZoneRole.PAD
    assert find_zone(OBRA_BOSS.zones, 0.77, 0.55).id == "wall_r"
    assert find_zone(OBRA_BOSS.zones, 0.02, 0.98) is None


def test_role_accepts_wire_values():
    zone = Zone("z", 0.5, 0.5, 0.1, "pattern-rhythm")

    assert zone.role is ZoneRole.PATTERN_RHYTHM
    assert zone.to_dict()["role"] == "pattern-rhythm"


@pytest.mark.parametrize("data", [
    {"id": "z", "x": 0.5, "y": 0.5, "r": 0.1, "role": "violin"},
    {"id": "z", "x": 1.5, "y": 0.5, "r": 0.1, "role": "pad"},
    {"id": "z", "x": 0.5, "y": 0.5, "role": "pad"},
])
def test_invalid_zone_is_rejected(data):
    with pytest.raises(ValueError):
        Zone.from_dict(data)


def test_duplicated_zone_ids_are_rejected():
    with pytest.raises(ValueError):
        PaintingPack("p", "P", "ref.jpg", (ZONES[0], ZONES[0]))


def test_pack_json_round_trip(tmp_path):
    path = tmp_path / "pack.json"

    save_painting_pack(OBRA_BOSS, str(path))
    data = json.loads(path.read_text())
    loaded = load_painting_pack(str(path))

    assert set(data) == {"id", "title", "referenceImage", "zones"}
    assert set(data["zones"][0]) == {"id", "x", "y", "r", "role"}
    assert loaded.zones == OBRA_BOSS.zones
    assert loaded.id == OBRA_BOSS.id


def test_loaded_pack_resolves_relative_paths(tmp_path):
    path = tmp_path / "pack.json"
    path.write_text(json.dumps({
        "id": "p",
        "title": "Pack",
        "referenceImage": "ref.jpg",
        "zones": [{"id": "z", "x": 0.5, "y": 0.5, "r": 0.2, "role": "epiano"}],
        "sounds": {"epiano": "sounds/epiano.wav", "pad": "https://example.org/pad.wav"},
    }))

    pack = load_painting_pack(str(path))

    assert pack.reference_image == str(tmp_path / "ref.jpg")
    assert pack.sounds["epiano"] == str(tmp_path / "sounds" / "epiano.wav")
    assert pack.sounds["pad"] == "https://example.org/pad.wav"


def test_pack_missing_fields_is_rejected():
    with pytest.raises(ValueError):
        PaintingPack.from_dict({"id": "p", "zones": []})
