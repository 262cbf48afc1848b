#!/usr/bin/env python3
"""
Seed the colleges table with a starter set of institutions.

Existing colleges (matched by code or name) are updated in place, so the
script can be re-run safely.

Usage:
    cd api && python seed_colleges.py
"""

import logging
import sys

from pyqvault.config.database import SessionLocal, init_db
from pyqvault.services.college_service import CollegeService

logger = logging.getLogger(__name__)

COLLEGES = [
    {
        "name": "Indian Institute of Technology Bombay",
        "shortName": "IIT Bombay",
        "code": "IITB",
        "type": "Government",
        "category": "Technical",
        "location": "Mumbai, Maharashtra",
        "address": "Powai, Mumbai",
        "state": "Maharashtra",
        "city": "Mumbai",
        "establishedYear": 1958,
        "affiliation": "Autonomous",
        "courses": ["B.Tech", "M.Tech", "PhD", "MBA", "M.Sc"],
        "branches": ["Computer Science", "Electrical Engineering", "Mechanical Engineering",
                     "Civil Engineering", "Chemical Engineering", "Aerospace Engineering"],
        "website": "https://www.iitb.ac.in",
    },
    {
        "name": "Indian Institute of Technology Delhi",
        "shortName": "IIT Delhi",
        "code": "IITD",
        "type": "Government",
        "category": "Technical",
        "location": "New Delhi, Delhi",
        "address": "Hauz Khas, New Delhi",
        "state": "Delhi",
        "city": "New Delhi",
        "establishedYear": 1961,
        "affiliation": "Autonomous",
        "courses": ["B.Tech", "M.Tech", "PhD", "MBA", "M.Sc"],
        "branches": ["Computer Science", "Electrical Engineering", "Mechanical Engineering",
                     "Civil Engineering", "Chemical Engineering"],
        "website": "https://www.iitd.ac.in",
    },
    {
        "name": "Indian Institute of Technology Madras",
        "shortName": "IIT Madras",
        "code": "IITM",
        "type": "Government",
        "category": "Technical",
        "location": "Chennai, Tamil Nadu",
        "address": "Sardar Patel Road, Adyar",
        "state": "Tamil Nadu",
        "city": "Chennai",
        "establishedYear": 1959,
        "affiliation": "Autonomous",
        "courses": ["B.Tech", "M.Tech", "PhD", "MBA", "M.Sc"],
        "branches": ["Computer Science", "Electrical Engineering", "Mechanical Engineering",
                     "Civil Engineering", "Ocean Engineering"],
        "website": "https://www.iitm.ac.in",
    },
    {
        "name": "National Institute of Technology Trichy",
        "shortName": "NIT Trichy",
        "code": "NITT",
        "type": "Government",
        "category": "Technical",
        "location": "Tiruchirappalli, Tamil Nadu",
        "address": "Tanjore Main Road, Thuvakudi",
        "state": "Tamil Nadu",
        "city": "Tiruchirappalli",
        "establishedYear": 1964,
        "affiliation": "Autonomous",
        "courses": ["B.Tech", "M.Tech", "PhD", "MBA", "MCA"],
        "branches": ["Computer Science", "Electronics and Communication", "Mechanical Engineering",
                     "Civil Engineering", "Production Engineering"],
        "website": "https://www.nitt.edu",
    },
    {
        "name": "All India Institute of Medical Sciences Delhi",
        "shortName": "AIIMS Delhi",
        "code": "AIIMSD",
        "type": "Government",
        "category": "Medical",
        "location": "New Delhi, Delhi",
        "address": "Ansari Nagar",
        "state": "Delhi",
        "city": "New Delhi",
        "establishedYear": 1956,
        "affiliation": "Autonomous",
        "courses": ["MBBS", "MD", "MS", "B.Sc Nursing", "PhD"],
        "branches": ["Medicine", "Surgery", "Nursing"],
        "website": "https://www.aiims.edu",
    },
    {
        "name": "Indian Institute of Management Ahmedabad",
        "shortName": "IIM Ahmedabad",
        "code": "IIMA",
        "type": "Government",
        "category": "Management",
        "location": "Ahmedabad, Gujarat",
        "address": "Vastrapur",
        "state": "Gujarat",
        "city": "Ahmedabad",
        "establishedYear": 1961,
        "affiliation": "Autonomous",
        "courses": ["PGP", "PGPX", "PhD"],
        "branches": ["Management"],
        "website": "https://www.iima.ac.in",
    },
    {
        "name": "Birla Institute of Technology and Science Pilani",
        "shortName": "BITS Pilani",
        "code": "BITSP",
        "type": "Private",
        "category": "Technical",
        "location": "Pilani, Rajasthan",
        "address": "Vidya Vihar",
        "state": "Rajasthan",
        "city": "Pilani",
        "establishedYear": 1964,
        "affiliation": "Deemed University",
        "courses": ["B.E.", "M.E.", "M.Sc", "PhD", "MBA"],
        "branches": ["Computer Science", "Electrical and Electronics", "Mechanical Engineering",
                     "Chemical Engineering", "Civil Engineering"],
        "website": "https://www.bits-pilani.ac.in",
    },
    {
        "name": "National Institute of Design Ahmedabad",
        "shortName": "NID Ahmedabad",
        "code": "NIDA",
        "type": "Government",
        "category": "Design",
        "location": "Ahmedabad, Gujarat",
        "address": "Paldi",
        "state": "Gujarat",
        "city": "Ahmedabad",
        "establishedYear": 1961,
        "affiliation": "Autonomous",
        "courses": ["B.Des", "M.Des"],
        "branches": ["Industrial Design", "Communication Design", "Textile Design"],
        "website": "https://www.nid.edu",
    },
]


def main() -> int:
    init_db()
    db = SessionLocal()
    try:
        results = CollegeService(db).bulk_import(COLLEGES)
    finally:
        db.close()

    logger.info(
        f"Seeding finished: {results['inserted']} inserted, "
        f"{results['updated']} updated, {results['skipped']} skipped"
    )
    for error in results["errors"]:
        logger.error(f"  {error['college']}: {error['error']}")

    return 1 if results["errors"] else 0


if __name__ == "__main__":
    sys.exit(main())
