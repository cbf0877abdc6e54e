import sys
from dataclasses import dataclass, field

# Default branch used when a profile carries no (or an unknown) branch code.
DEFAULT_BRANCH = "CSE"

# CSB=Bioinfo, CSD=Design, CSZ=Special Topics all count as CSE electives.
CSE_PREFIXES = ("CSE", "CSB", "CSD", "CSZ")
MATH_PREFIXES = ("MTH",)
BIO_PREFIXES = ("BIO",)
DESIGN_PREFIXES = ("DES",)
ECE_PREFIXES = ("ECE",)

# Discipline electives are 3xx and above.
ELECTIVE_MIN_LEVEL = 300


@dataclass(frozen=True)
class SubDiscipline:
    """One flavour inside a combined elective bucket, with its own floor."""
    sub_id: str
    label: str
    prefixes: tuple
    min_credits: int


@dataclass(frozen=True)
class ElectiveBucket:
    """
    A discipline-elective credit requirement.

    `prefixes` is the full set of course prefixes the bucket accepts. When
    `sub_disciplines` is non-empty, each accepted course is credited to the
    first sub-discipline whose prefixes match, and every sub-discipline floor
    must be met on top of the combined requirement.
    """
    bucket_id: str
    label: str
    required_credits: int
    prefixes: tuple
    sub_disciplines: tuple = ()


@dataclass(frozen=True)
class BtpPolicy:
    min_credits: int = 8
    max_credits: int = 12
    max_per_semester: int = 8


@dataclass(frozen=True)
class HonorsPolicy:
    total_credits: int = 168
    min_cgpa: float = 8.0
    requires_btp: bool = True


@dataclass(frozen=True)
class BranchPolicy:
    branch: str
    label: str
    total_credits: int
    elective_buckets: tuple
    ssh_credits: int = 12
    sg_credits: int = 2
    cw_credits: int = 2
    max_online_credits: int = 8
    max_independent_credits: int = 8
    btp: BtpPolicy = field(default_factory=BtpPolicy)
    honors: HonorsPolicy = field(default_factory=HonorsPolicy)


def _cse_bucket(required: int) -> ElectiveBucket:
    return ElectiveBucket("cse_electives", "CSE Electives (3xx+)", required, CSE_PREFIXES)


def _split_bucket(second: SubDiscipline, required: int = 32, cse_min: int = 12) -> ElectiveBucket:
    cse = SubDiscipline("cse", "CSE", CSE_PREFIXES, cse_min)
    return ElectiveBucket(
        "discipline_electives",
        "Discipline Electives",
        required,
        CSE_PREFIXES + second.prefixes,
        (cse, second),
    )


_ECE_BUCKET = ElectiveBucket("ece_electives", "ECE Electives (3xx+)", 32, ECE_PREFIXES)

POLICIES = {
    "CSE": BranchPolicy(
        "CSE", "Computer Science and Engineering", 156, (_cse_bucket(32),),
    ),
    # 2019+ batches: fewer CSE electives, SSH doubles as the discipline bucket.
    "CSSS": BranchPolicy(
        "CSSS", "Computer Science and Social Sciences", 156, (_cse_bucket(16),),
        ssh_credits=28,
    ),
    "CSAM": BranchPolicy(
        "CSAM", "Computer Science and Applied Mathematics", 156,
        (_split_bucket(SubDiscipline("math", "Math", MATH_PREFIXES, 12)),),
    ),
    "CSB": BranchPolicy(
        "CSB", "Computer Science and Biosciences", 156,
        (_split_bucket(SubDiscipline("bio", "Bio", BIO_PREFIXES, 12)),),
    ),
    "CSD": BranchPolicy(
        "CSD", "Computer Science and Design", 156,
        (_split_bucket(SubDiscipline("design", "Design", DESIGN_PREFIXES, 12)),),
    ),
    "CSAI": BranchPolicy(
        "CSAI", "Computer Science and Artificial Intelligence", 156, (_cse_bucket(32),),
    ),
    "ECE": BranchPolicy(
        "ECE", "Electronics and Communications Engineering", 156, (_ECE_BUCKET,),
    ),
    "EVE": BranchPolicy(
        "EVE", "Electronics and VLSI Engineering", 156, (_ECE_BUCKET,),
    ),
}


def list_branches() -> list[str]:
    return list(POLICIES)


def get_policy(branch_code) -> BranchPolicy:
    """Return the policy for a branch code, falling back to CSE for anything unknown."""
    key = str(branch_code or "").strip().upper()
    if key in POLICIES:
        return POLICIES[key]
    if key:
        print(
            f"[WARN] Unknown branch '{key}'; using {DEFAULT_BRANCH} requirements.",
            file=sys.stderr,
        )
    return POLICIES[DEFAULT_BRANCH]
