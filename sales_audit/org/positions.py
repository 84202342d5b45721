from __future__ import annotations

# (code, name, level); a lower level means higher authority.
DEFAULT_POSITIONS: tuple[tuple[str, str, int], ...] = (
    ("CEO", "Chief Executive Officer", 1),
    ("CBO", "Chief Business Officer", 2),
    ("BrM", "Branch Manager", 3),
    ("SVBM", "Senior Vice Branch Manager", 4),
    ("VBM", "Vice Branch Manager", 5),
    ("SEM", "Senior Executive Manager", 6),
    ("EM", "Executive Manager", 7),
    ("SBM", "Senior Business Manager", 8),
    ("BsM", "Business Manager", 9),
    ("SBC", "Senior Business Consultant", 10),
    ("BC", "Business Consultant", 11),
)


def ensure_default_positions(position_model=None) -> dict[str, object]:
    """Create missing default positions and return them keyed by code.

    Data migrations pass the historical model; everything else uses the
    live one.
    """
    if position_model is None:
        from sales_audit.org.models import Position  # noqa: PLC0415

        position_model = Position

    out: dict[str, object] = {}
    for code, name, level in DEFAULT_POSITIONS:
        obj, _ = position_model.objects.get_or_create(
            code=code, defaults={"name": name, "level": level}
        )
        out[code] = obj
    return out
