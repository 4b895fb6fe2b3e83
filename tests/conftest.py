import pytest

from incident_graph.models import DatasetConfig
from incident_graph.normalization import normalize_entities


@pytest.fixture
def aiid_document():
    """Three incidents; inc-1 is the best connected, inc-3 has no links."""
    return [
        {
            "@id": "inc-1",
            "@type": "aiid:Incident",
            "title": "Crash",
            "deployer": {"@id": "org-1", "@type": "core:Organization", "name": "Acme"},
            "reports": [
                {"@id": "rep-1", "@type": "aiid:Report", "title": "R1"},
                {"@id": "rep-2", "@type": "aiid:Report", "title": "R2"},
            ],
        },
        {
            "@id": "inc-2",
            "@type": "aiid:Incident",
            "title": "Glitch",
            "deployer": {"@id": "org-2", "@type": "core:Organization", "name": "Beta"},
        },
        {"@id": "inc-3", "@type": "aiid:Incident", "title": "Quiet"},
    ]


@pytest.fixture
def oecd_document():
    """One incident whose organization also appears in the aiid document."""
    return [
        {
            "@id": "oecd-1",
            "@type": "oecd:Incident",
            "title": "Reported",
            "involves": {"@id": "org-1", "@type": "core:Organization", "name": "Acme Corp", "country": "US"},
        }
    ]


@pytest.fixture
def cyclic_document():
    return [
        {"id": "a", "type": "T", "ref": {"id": "b", "type": "T"}},
        {"id": "b", "type": "T", "ref": {"id": "a", "type": "T"}},
    ]


@pytest.fixture
def aiid_dataset(aiid_document):
    return DatasetConfig(id="aiid", data=normalize_entities(aiid_document), name="AIID")


@pytest.fixture
def oecd_dataset(oecd_document):
    return DatasetConfig(id="oecd", data=normalize_entities(oecd_document), name="OECD")
