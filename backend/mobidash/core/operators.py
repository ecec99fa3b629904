"""
Registry of public GBFS systems and their auto-discovery URLs.
"""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Operator:
    id: str
    name: str
    location: str
    gbfs_url: str
    website: Optional[str] = None


OPERATORS: Tuple[Operator, ...] = (
    Operator(
        id="citibike-nyc",
        name="Citi Bike",
        location="New York City, NY",
        gbfs_url="https://gbfs.lyft.com/gbfs/2.3/bkn/gbfs.json",
        website="https://citibikenyc.com",
    ),
    Operator(
        id="bay-wheels",
        name="Bay Wheels",
        location="San Francisco Bay Area, CA",
        gbfs_url="https://gbfs.lyft.com/gbfs/2.3/bay/gbfs.json",
        website="https://www.lyft.com/bikes/bay-wheels",
    ),
    Operator(
        id="bluebikes",
        name="Bluebikes",
        location="Boston, MA",
        gbfs_url="https://gbfs.lyft.com/gbfs/2.3/bos/gbfs.json",
        website="https://www.bluebikes.com",
    ),
    Operator(
        id="divvy",
        name="Divvy",
        location="Chicago, IL",
        gbfs_url="https://gbfs.lyft.com/gbfs/2.3/chi/gbfs.json",
        website="https://www.divvybikes.com",
    ),
    Operator(
        id="capital-bikeshare",
        name="Capital Bikeshare",
        location="Washington, DC",
        gbfs_url="https://gbfs.lyft.com/gbfs/2.3/dca/gbfs.json",
        website="https://www.capitalbikeshare.com",
    ),
    Operator(
        id="bixi-montreal",
        name="BIXI Montréal",
        location="Montreal, QC, Canada",
        gbfs_url="https://gbfs.velobixi.com/gbfs/gbfs.json",
        website="https://www.bixi.com",
    ),
    Operator(
        id="bike-share-toronto",
        name="Bike Share Toronto",
        location="Toronto, ON, Canada",
        gbfs_url="https://tor.publicbikesystem.net/customer/gbfs/v2/gbfs.json",
        website="https://bikesharetoronto.com",
    ),
    Operator(
        id="coast-bike-share",
        name="Coast Bike Share",
        location="Tampa Bay, FL",
        gbfs_url="https://gbfs.lyft.com/gbfs/2.3/tbw/gbfs.json",
        website="https://www.coastbikeshare.com",
    ),
)


def get_operator(operator_id: str, operators: Tuple[Operator, ...] = OPERATORS) -> Optional[Operator]:
    for operator in operators:
        if operator.id == operator_id:
            return operator
    return None
