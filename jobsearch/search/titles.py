"""Title relevance index: canonical job titles and category mappings.

Free-text scoring alone matches too broadly, for example a query for one
profession picking up postings whose summary happens to mention a common
word. The related titles computed here feed the mandatory title gate of the
query planner.
"""

from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

MIN_KEYWORD_LENGTH = 3

DEFAULT_TITLES: Tuple[str, ...] = (
    # Software and data
    "Software Engineer",
    "Software Developer",
    "Frontend Developer",
    "Backend Developer",
    "Full Stack Developer",
    "Mobile Developer",
    "Web Developer",
    "DevOps Engineer",
    "Site Reliability Engineer",
    "Platform Engineer",
    "QA Engineer",
    "Test Engineer",
    "Data Engineer",
    "Data Scientist",
    "Data Analyst",
    "Machine Learning Engineer",
    "Business Analyst",
    "Systems Administrator",
    "Network Engineer",
    "Security Engineer",
    "IT Support Specialist",
    "Help Desk Technician",
    "Product Manager",
    "Project Manager",
    "UX Designer",
    "UI Designer",
    "Graphic Designer",
    # Engineering disciplines
    "Civil Engineer",
    "Mechanical Engineer",
    "Electrical Engineer",
    "Chemical Engineer",
    # Healthcare
    "Registered Nurse",
    "Licensed Practical Nurse",
    "Nurse Practitioner",
    "Nursing Assistant",
    "Home Health Aide",
    "Caregiver",
    "Physician",
    "Physician Assistant",
    "Pharmacist",
    "Pharmacy Technician",
    "Physical Therapist",
    "Medical Assistant",
    "Dental Hygienist",
    "Dental Assistant",
    # Education
    "Teacher",
    "Teaching Assistant",
    "Tutor",
    "Substitute Teacher",
    # Business and finance
    "Accountant",
    "Bookkeeper",
    "Financial Analyst",
    "Sales Representative",
    "Account Executive",
    "Marketing Manager",
    "Marketing Specialist",
    "Recruiter",
    "Human Resources Generalist",
    "Administrative Assistant",
    "Office Manager",
    "Receptionist",
    "Customer Service Representative",
    # Logistics and trades
    "Truck Driver",
    "Delivery Driver",
    "Warehouse Associate",
    "Forklift Operator",
    "Electrician",
    "Plumber",
    "Carpenter",
    "Welder",
    "Automotive Technician",
    "Maintenance Technician",
    # Retail and hospitality
    "Cashier",
    "Retail Sales Associate",
    "Store Manager",
    "Line Cook",
    "Chef",
    "Barista",
    "Server",
    "Housekeeper",
    "Janitor",
    "Security Guard",
)

# Category keyword -> titles it implies even when no title contains the word
DEFAULT_TITLE_MAPPINGS: Dict[str, Tuple[str, ...]] = {
    "developer": (
        "Software Engineer",
        "Software Developer",
        "Frontend Developer",
        "Backend Developer",
        "Full Stack Developer",
        "Mobile Developer",
        "Web Developer",
    ),
    "programmer": ("Software Engineer", "Software Developer", "Web Developer"),
    "devops": ("DevOps Engineer", "Site Reliability Engineer", "Platform Engineer"),
    "tech": (
        "Software Engineer",
        "Software Developer",
        "DevOps Engineer",
        "Data Engineer",
        "Systems Administrator",
        "IT Support Specialist",
    ),
    "data": ("Data Engineer", "Data Scientist", "Data Analyst", "Machine Learning Engineer"),
    "healthcare": (
        "Registered Nurse",
        "Licensed Practical Nurse",
        "Nurse Practitioner",
        "Nursing Assistant",
        "Physician",
        "Physician Assistant",
        "Medical Assistant",
        "Pharmacist",
    ),
    "medical": ("Physician", "Physician Assistant", "Medical Assistant", "Registered Nurse"),
    "nursing": (
        "Registered Nurse",
        "Licensed Practical Nurse",
        "Nurse Practitioner",
        "Nursing Assistant",
    ),
    "caregiving": ("Caregiver", "Home Health Aide", "Nursing Assistant"),
    "education": ("Teacher", "Teaching Assistant", "Tutor", "Substitute Teacher"),
    "finance": ("Accountant", "Bookkeeper", "Financial Analyst"),
    "accounting": ("Accountant", "Bookkeeper"),
    "sales": ("Sales Representative", "Account Executive", "Retail Sales Associate"),
    "marketing": ("Marketing Manager", "Marketing Specialist"),
    "design": ("UX Designer", "UI Designer", "Graphic Designer"),
    "human resources": ("Recruiter", "Human Resources Generalist"),
    "office": ("Administrative Assistant", "Office Manager", "Receptionist"),
    "logistics": ("Truck Driver", "Delivery Driver", "Warehouse Associate", "Forklift Operator"),
    "trades": ("Electrician", "Plumber", "Carpenter", "Welder", "Maintenance Technician"),
    "hospitality": ("Line Cook", "Chef", "Barista", "Server", "Housekeeper"),
    "restaurant": ("Line Cook", "Chef", "Server", "Barista"),
    "retail": ("Cashier", "Retail Sales Associate", "Store Manager"),
    "customer service": ("Customer Service Representative", "Receptionist"),
}


class TitleCatalogue:
    """Ordered canonical titles plus keyword -> title-set mappings.

    Immutable once built. Every title referenced by a mapping must be part of
    the catalogue.
    """

    def __init__(
        self,
        titles: Sequence[str],
        mappings: Optional[Mapping[str, Iterable[str]]] = None,
    ):
        ordered: List[str] = []
        for title in titles:
            if title not in ordered:
                ordered.append(title)
        self._titles: Tuple[str, ...] = tuple(ordered)
        self._lowered: Tuple[Tuple[str, str], ...] = tuple(
            (title, title.lower()) for title in self._titles
        )

        known = set(self._titles)
        normalized: Dict[str, Tuple[str, ...]] = {}
        for keyword, mapped in (mappings or {}).items():
            key = keyword.strip().lower()
            mapped_titles = tuple(mapped)
            unknown = [title for title in mapped_titles if title not in known]
            if unknown:
                raise ValueError(
                    f"Title mapping '{key}' references unknown titles: {', '.join(unknown)}"
                )
            normalized[key] = mapped_titles
        self._mappings = MappingProxyType(normalized)

    @property
    def titles(self) -> Tuple[str, ...]:
        return self._titles

    @property
    def mappings(self) -> Mapping[str, Tuple[str, ...]]:
        return self._mappings

    def extended(
        self,
        titles: Iterable[str] = (),
        mappings: Optional[Mapping[str, Iterable[str]]] = None,
    ) -> "TitleCatalogue":
        """Return a new catalogue with extra titles and mappings merged in.

        Extra mapping titles are appended to an existing keyword's titles.

        Raises:
            ValueError: If a mapping references a title not in the catalogue
        """
        merged: Dict[str, List[str]] = {key: list(value) for key, value in self._mappings.items()}
        for keyword, mapped in (mappings or {}).items():
            bucket = merged.setdefault(keyword.strip().lower(), [])
            bucket.extend(title for title in mapped if title not in bucket)
        return TitleCatalogue(list(self._titles) + list(titles), merged)

    def related_titles(self, query: Optional[str]) -> Tuple[str, ...]:
        """Compute the canonical titles related to a free-text query.

        A title is related when any of these hold:
        - its lowercased form contains the whole lowercased query
        - its lowercased form contains a whitespace-separated query keyword
          of at least three characters
        - the lowercased query contains a mapping keyword that lists it

        Args:
            query: Raw query text

        Returns:
            Related titles without duplicates: substring and keyword hits in
            catalogue order, then mapping hits in mapping order. Empty for an
            empty or blank query.
        """
        phrase = (query or "").strip().lower()
        if not phrase:
            return ()

        keywords = [word for word in phrase.split() if len(word) >= MIN_KEYWORD_LENGTH]

        related = {}
        for title, lowered in self._lowered:
            if phrase in lowered or any(keyword in lowered for keyword in keywords):
                related.setdefault(title, None)

        for keyword, mapped in self._mappings.items():
            if keyword in phrase:
                for title in mapped:
                    related.setdefault(title, None)

        return tuple(related)

    def __len__(self) -> int:
        return len(self._titles)


DEFAULT_TITLE_CATALOGUE = TitleCatalogue(DEFAULT_TITLES, DEFAULT_TITLE_MAPPINGS)
