from __future__ import annotations

from dataclasses import dataclass

CATEGORY_A = "A"
CATEGORY_B = "B"
CATEGORY_C = "C"

CATEGORY_NAMES = {
    CATEGORY_A: "Revenue Drivers",
    CATEGORY_B: "Team Structure Strength",
    CATEGORY_C: "Team Culture & Operations",
}


@dataclass(frozen=True)
class Pillar:
    id: int
    category: str
    name: str
    name_id: str


PILLARS: tuple[Pillar, ...] = (
    Pillar(1, CATEGORY_A, "Ability to Find Potential Customers", "Kemampuan Mencari Calon Nasabah"),
    Pillar(2, CATEGORY_A, "Ability to Close Sales", "Kemampuan Menutup Penjualan"),
    Pillar(3, CATEGORY_A, "Ability to Retain Active Customers", "Kemampuan Menjaga Nasabah Aktif"),
    Pillar(4, CATEGORY_A, "Ability to Develop New Team Members", "Kemampuan Mencetak Tim Baru (Kaderisasi)"),
    Pillar(5, CATEGORY_A, "Achievement of Sales Targets", "Pencapaian Target Penjualan"),
    Pillar(6, CATEGORY_A, "Mastery of Regional Market", "Penguasaan Pasar Wilayah"),
    Pillar(7, CATEGORY_B, "Completeness of Team Structure", "Kelengkapan Struktur Tim"),
    Pillar(8, CATEGORY_B, "Number of Active Lines", "Jumlah Jalur Aktif"),
    Pillar(9, CATEGORY_B, "Leadership Productivity", "Produktivitas Pimpinan"),
    Pillar(10, CATEGORY_B, "Readiness for Succession", "Kesiapan Regenerasi"),
    Pillar(11, CATEGORY_B, "Inter-Team Cooperation", "Kerja Sama Antar Tim"),
    Pillar(12, CATEGORY_B, "Adaptability", "Kemampuan Beradaptasi"),
    Pillar(13, CATEGORY_C, "Work Discipline & Consistency", "Disiplin & Konsistensi Kerja"),
    Pillar(14, CATEGORY_C, "Team Spirit & Motivation", "Semangat & Motivasi Tim"),
    Pillar(15, CATEGORY_C, "Innovation in Work Methods", "Inovasi Cara Kerja"),
    Pillar(16, CATEGORY_C, "Training & Skill Development", "Pelatihan & Pengembangan Keterampilan"),
    Pillar(17, CATEGORY_C, "Customer Satisfaction", "Kepuasan Nasabah"),
    Pillar(18, CATEGORY_C, "Understanding of Local Market", "Pemahaman Pasar Lokal"),
)

PILLARS_BY_ID = {p.id: p for p in PILLARS}
PILLAR_COUNT = len(PILLARS)


def validate_pillar_answers(answers: list[dict]) -> list[str]:
    """Return human-readable problems; an empty list means the set is complete.

    Every pillar must be answered exactly once, with the category it belongs
    to and a whole score from 1 to 5.
    """
    errors: list[str] = []
    seen: set[int] = set()
    for answer in answers:
        pillar_id = answer.get("pillar_id")
        pillar = PILLARS_BY_ID.get(pillar_id)
        if pillar is None:
            errors.append(f"Unknown pillar id {pillar_id!r}")
            continue
        if pillar_id in seen:
            errors.append(f"Pillar {pillar_id} answered more than once")
        seen.add(pillar_id)
        if answer.get("category") != pillar.category:
            errors.append(
                f"Pillar {pillar_id} belongs to category {pillar.category}, "
                f"got {answer.get('category')!r}"
            )
        score = answer.get("score")
        if isinstance(score, bool) or not isinstance(score, int) or not 1 <= score <= 5:
            errors.append(f"Pillar {pillar_id} score must be an integer from 1 to 5")
    missing = sorted(set(PILLARS_BY_ID) - seen)
    if missing:
        errors.append(
            "Missing answers for pillar(s): " + ", ".join(str(m) for m in missing)
        )
    return errors
