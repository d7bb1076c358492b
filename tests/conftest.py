import numpy as np
import pandas as pd
import pytest

RAW_HEADER = [
    "INCIDENT_KEY", "OCCUR_DATE", "OCCUR_TIME", "BORO", "LOC_OF_OCCUR_DESC", "PRECINCT",
    "JURISDICTION_CODE", "LOCATION_DESC", "STATISTICAL_MURDER_FLAG",
    "PERP_AGE_GROUP", "PERP_SEX", "PERP_RACE", "VIC_AGE_GROUP", "VIC_SEX", "VIC_RACE",
    "Latitude", "Longitude",
]


def make_incident(**overrides) -> dict:
    row = {
        "occur_date": "01/15/2010",
        "occur_time": "14:30:00",
        "borough": "BROOKLYN",
        "precinct": 75,
        "is_murder": False,
        "perp_age_group": "18-24",
        "perp_sex": "M",
        "perp_race": "BLACK",
        "vic_age_group": "25-44",
        "vic_sex": "M",
        "vic_race": "BLACK",
    }
    row.update(overrides)
    return row


def make_incidents(rows: list[dict]) -> pd.DataFrame:
    df = pd.DataFrame(rows)
    df["is_murder"] = df["is_murder"].astype("boolean")
    df["precinct"] = df["precinct"].astype("Int64")
    return df


@pytest.fixture
def incidents() -> pd.DataFrame:
    """Small mixed table: several boroughs, missing perpetrators, a bad time and a missing flag."""
    rows = [
        make_incident(occur_date="01/04/2010", occur_time="00:00:00", borough="BRONX", precinct=40,
                      is_murder=True, perp_age_group=None, perp_sex=None, perp_race=None),
        make_incident(occur_date="01/04/2010", occur_time="00:45:00", borough="BRONX", precinct=40,
                      is_murder=False, perp_age_group="(null)", perp_sex="", perp_race=np.nan),
        make_incident(occur_date="06/12/2011", occur_time="13:30:00", borough="BROOKLYN", precinct=75,
                      is_murder=False),
        make_incident(occur_date="06/12/2011", occur_time="23:10:00", borough="BROOKLYN", precinct=73,
                      is_murder=True, vic_sex=None),
        make_incident(occur_date="03/03/2012", occur_time="12:00:00", borough="QUEENS", precinct=113,
                      is_murder=False, vic_race=None),
        make_incident(occur_date="03/03/2012", occur_time="not a time", borough="QUEENS", precinct=113,
                      is_murder=None),
        make_incident(occur_date=None, occur_time="08:00:00", borough=None, precinct=75,
                      is_murder=False),
        make_incident(occur_date="12/30/2012", occur_time="22:00:00", borough="MANHATTAN", precinct=32,
                      is_murder=False),
    ]
    return make_incidents(rows)


@pytest.fixture
def model_incidents() -> pd.DataFrame:
    """Borough A: murder rate 0.5 (n=400), borough B: 0.1 (n=500)."""
    rows = (
        [make_incident(borough="A", is_murder=True)] * 200
        + [make_incident(borough="A", is_murder=False)] * 200
        + [make_incident(borough="B", is_murder=True)] * 50
        + [make_incident(borough="B", is_murder=False)] * 450
    )
    return make_incidents(rows)


@pytest.fixture
def raw_csv(tmp_path):
    """Raw CSV in the NYC Open Data layout (upper-case headers, true/false flags)."""
    lines = [
        ",".join(RAW_HEADER),
        "1,01/04/2010,00:00:00,BRONX,OUTSIDE,40,0,STREET,true,,,,25-44,M,BLACK,40.8,-73.9",
        "2,01/04/2010,13:30:00,BROOKLYN,,75,0,(null),false,(null),(null),(null),18-24,F,WHITE HISPANIC,40.6,-73.9",
        "3,06/12/2011,23:10:00,QUEENS,,113,0,,N,25-44,M,BLACK,<18,M,BLACK,40.7,-73.8",
        "4,12/31/2011,09:05:00, MANHATTAN ,,32,0,,Y,18-24,M,BLACK,25-44,M,BLACK,40.8,-73.9",
        "5,12/31/2011,09:05:00,STATEN ISLAND,,120,0,,,18-24,M,BLACK,25-44,M,BLACK,40.6,-74.1",
    ]
    path = tmp_path / "shootings.csv"
    path.write_text("\n".join(lines) + "\n")
    return path
