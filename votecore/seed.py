"""
Demo seed set: the 2027 general-election ballots and the test identities.

Loaded once when a VotingSystem is built with seeding enabled.
"""
import logging
from datetime import datetime, timedelta

from .catalog import ElectionCatalog
from .schemas import Candidate, Election
from .sessions import IdentityRegistry

logger = logging.getLogger(__name__)

_PEXELS = "https://images.pexels.com/photos/{0}/pexels-photo-{0}.jpeg"

SEED_ELECTIONS = [
    {
        "id": "election_2027_presidential",
        "title": "2027 Presidential Election",
        "description": "National Presidential Election for the term 2027-2032",
        "candidates": [
            ("candidate_1", "Dr. William Ruto", "United Democratic Alliance (UDA)", "President",
             "Current Deputy President with extensive experience in economic policy and agricultural development.",
             "Bottom-up economic transformation focusing on hustler economy and agricultural modernization.",
             774909),
            ("candidate_2", "Raila Odinga", "Azimio la Umoja Coalition", "President",
             "Former Prime Minister and veteran opposition leader with decades of political experience.",
             "Social democratic agenda focusing on universal healthcare, education, and social protection.",
             2182970),
            ("candidate_3", "George Wajackoyah", "Roots Party", "President",
             "Legal scholar and environmental advocate with focus on alternative economic models.",
             "Revolutionary economic transformation through cannabis legalization and debt forgiveness.",
             1239291),
        ],
    },
    {
        "id": "election_2027_governor_nairobi",
        "title": "2027 Nairobi County Governor Election",
        "description": "Election for Nairobi County Governor for the term 2027-2032",
        "candidates": [
            ("gov_candidate_1", "Johnson Sakaja", "United Democratic Alliance (UDA)",
             "Governor - Nairobi County",
             "Current Nairobi Governor with background in business and youth leadership.",
             "Urban transformation through digital governance, infrastructure development, and youth empowerment.",
             2379004),
            ("gov_candidate_2", "Polycarp Igathe", "Azimio la Umoja Coalition",
             "Governor - Nairobi County",
             "Former Deputy Governor and corporate executive with extensive private sector experience.",
             "Professional management of county resources with focus on service delivery and transparency.",
             2182970),
        ],
    },
    {
        "id": "election_2027_senator_nairobi",
        "title": "2027 Nairobi County Senator Election",
        "description": "Election for Nairobi County Senator for the term 2027-2032",
        "candidates": [
            ("sen_candidate_1", "Edwin Sifuna", "Orange Democratic Movement (ODM)",
             "Senator - Nairobi County",
             "Current Nairobi Senator and ODM Secretary General with strong legislative record.",
             "Strengthening devolution and protecting county interests at the national level.",
             1043471),
            ("sen_candidate_2", "Margaret Wanjiru", "United Democratic Alliance (UDA)",
             "Senator - Nairobi County",
             "Former MP and religious leader with focus on social justice and women empowerment.",
             "Championing women and youth rights while promoting economic empowerment programs.",
             1239291),
        ],
    },
    {
        "id": "election_2027_mp_westlands",
        "title": "2027 Westlands Constituency MP Election",
        "description": "Election for Member of Parliament - Westlands Constituency for the term 2027-2032",
        "candidates": [
            ("mp_candidate_1", "Tim Wanyonyi", "Orange Democratic Movement (ODM)",
             "Member of Parliament - Westlands",
             "Current Westlands MP with strong track record in constituency development.",
             "Continued infrastructure development and improved healthcare services for Westlands residents.",
             2379004),
            ("mp_candidate_2", "Nelson Havi", "United Democratic Alliance (UDA)",
             "Member of Parliament - Westlands",
             "Former Law Society of Kenya President and constitutional lawyer.",
             "Legal reforms and enhanced business environment for economic growth in Westlands.",
             1043471),
        ],
    },
    {
        "id": "election_2027_woman_rep_nairobi",
        "title": "2027 Nairobi County Woman Representative Election",
        "description": "Election for Woman Representative - Nairobi County for the term 2027-2032",
        "candidates": [
            ("wr_candidate_1", "Esther Passaris", "Orange Democratic Movement (ODM)",
             "Woman Representative - Nairobi County",
             "Current Nairobi Woman Rep with focus on women and youth empowerment programs.",
             "Advancing gender equality and economic empowerment for women and youth in Nairobi.",
             774909),
            ("wr_candidate_2", "Millicent Omanga", "United Democratic Alliance (UDA)",
             "Woman Representative - Nairobi County",
             "Former Senator with extensive experience in women affairs and community development.",
             "Strengthening women cooperatives and promoting small business development.",
             1239291),
        ],
    },
    {
        "id": "election_2027_mca_kilimani",
        "title": "2027 Kilimani Ward MCA Election",
        "description": "Election for Member of County Assembly - Kilimani Ward for the term 2027-2032",
        "candidates": [
            ("mca_candidate_1", "Moses Ogeto", "Orange Democratic Movement (ODM)",
             "MCA - Kilimani Ward",
             "Current Kilimani Ward MCA with focus on urban planning and infrastructure development.",
             "Improved waste management, better roads, and enhanced security for Kilimani residents.",
             2379004),
            ("mca_candidate_2", "Grace Wanjiku", "United Democratic Alliance (UDA)",
             "MCA - Kilimani Ward",
             "Community leader and businesswoman with strong grassroots connections.",
             "Youth empowerment programs and improved access to county services for all residents.",
             774909),
        ],
    },
]

# (id, national_id, password, first, last, email, phone, dob, role, county, constituency, ward)
SEED_IDENTITIES = [
    ("user_001", "12345678", "password123", "John", "Doe", "john.doe@example.com",
     "+254712345678", "1990-01-15", "voter", "Nairobi", "Westlands", "Kilimani"),
    ("user_002", "87654321", "mypassword", "Jane", "Smith", "jane.smith@example.com",
     "+254787654321", "1985-05-20", "voter", "Nairobi", "Westlands", "Parklands"),
    ("user_003", "11223344", "secure123", "Peter", "Kamau", "peter.kamau@example.com",
     "+254711223344", "1992-08-10", "voter", "Nairobi", "Starehe", "Nairobi Central"),
    ("user_004", "99887766", "vote2027", "Mary", "Wanjiku", "mary.wanjiku@example.com",
     "+254799887766", "1988-12-03", "voter", "Nairobi", "Dagoretti North", "Kilimani"),
    ("user_005", "55443322", "kenya2027", "David", "Ochieng", "david.ochieng@example.com",
     "+254755443322", "1995-03-25", "voter", "Mombasa", "Mvita", "Majengo"),
    ("admin_001", "11111111", "admin123", "Admin", "User", "admin@iebc.go.ke",
     "+254700000001", "1980-01-01", "admin", "Nairobi", "Nairobi Central", "Central"),
    ("agent_001", "22222222", "agent123", "Agent", "Monitor", "agent@iebc.go.ke",
     "+254700000002", "1985-01-01", "agent", "Nairobi", "Nairobi Central", "Central"),
]


def build_elections(now: datetime, duration_days: int = 30) -> list[Election]:
    """The six seeded ballots, all active from ``now``."""
    elections = []
    for entry in SEED_ELECTIONS:
        candidates = tuple(
            Candidate(id=cid, name=name, party=party, position=position,
                      biography=bio, manifesto=manifesto,
                      image_ref=_PEXELS.format(photo))
            for cid, name, party, position, bio, manifesto, photo in entry["candidates"]
        )
        elections.append(Election(
            id=entry["id"],
            title=entry["title"],
            description=entry["description"],
            start_at=now,
            end_at=now + timedelta(days=duration_days),
            status="active",
            candidates=candidates,
        ))
    return elections


def seed_catalog(catalog: ElectionCatalog, now: datetime, duration_days: int = 30) -> None:
    for election in build_elections(now, duration_days):
        catalog.add(election)
    logger.info(f"Seeded {len(SEED_ELECTIONS)} elections")


def seed_identities(registry: IdentityRegistry) -> None:
    for (identity_id, national_id, password, first, last, email, phone, dob,
         role, county, constituency, ward) in SEED_IDENTITIES:
        registry.register(
            national_id, password, first, last, email,
            role=role, verified=True, identity_id=identity_id,
            phone_number=phone, date_of_birth=dob,
            county=county, constituency=constituency, ward=ward,
        )
    logger.info(f"Seeded {len(SEED_IDENTITIES)} identities")
