import pytest

TIMESTAMP = "2025-10-01T00:00:00Z"


def build_minimal_frmr():
    """One term with an alias, one flat requirement using it, one mapped indicator"""
    return {
        "info": {
            "title": "FedRAMP Machine Readable Documentation",
            "description": "Example",
            "version": "25.10A",
            "last_updated": "2025-10-01"
        },
        "FRD": {
            "info": {"name": "Definitions", "short_name": "FRD"},
            "data": {
                "both": {
                    "FRD-ET": {
                        "term": "Example Term",
                        "alts": ["ET"],
                        "definition": "A term used in examples."
                    }
                }
            }
        },
        "FRR": {
            "EXA": {
                "info": {
                    "name": "Example Process",
                    "short_name": "EXA",
                    "web_name": "example-process",
                    "front_matter": {"purpose": "Demonstrate the conversion."}
                },
                "data": {
                    "both": {
                        "base": {
                            "FRR-EXA-01": {
                                "name": "Use Example Terms",
                                "statement": "Providers MUST use ET.",
                                "primary_key_word": "MUST",
                                "terms": ["ET"]
                            }
                        }
                    }
                }
            }
        },
        "KSI": {
            "EXD": {
                "id": "KSI-EXD",
                "name": "Example Domain",
                "short_name": "EXD",
                "web_name": "example-domain",
                "theme": "Examples",
                "indicators": {
                    "KSI-EXD-01": {
                        "name": "Example Indicator",
                        "statement": "Demonstrate account management.",
                        "controls": ["ac-2"]
                    }
                }
            }
        }
    }


def build_full_frmr():
    """Covers level variants, recurring keys, examples, notes and unmapped indicators"""
    return {
        "info": {
            "title": "FedRAMP Machine Readable Documentation",
            "description": "Example",
            "version": "25.11B",
            "last_updated": "2025-11-15"
        },
        "FRD": {
            "info": {"name": "Definitions", "short_name": "FRD"},
            "data": {
                "both": {
                    "FRD-ACV": {
                        "term": "Agency",
                        "alts": ["Agencies", "federal agency"],
                        "definition": "A federal agency.",
                        "reference": "44 USC 3502",
                        "reference_url": "https://www.law.cornell.edu/uscode/text/44/3502"
                    },
                    "FRD-CSO": {
                        "fka": "FRD-ALL-02",
                        "term": "Cloud Service Offering",
                        "alts": ["CSO"],
                        "definition": "A cloud service."
                    }
                },
                "20x": {
                    "FRD-IR": {
                        "term": "Incident Response",
                        "definition": "Responding to incidents.",
                        "reference": "NIST SP 800-61"
                    }
                }
            }
        },
        "FRR": {
            "ADS": {
                "info": {
                    "name": "Authorization Data Sharing",
                    "short_name": "ADS",
                    "web_name": "authorization-data-sharing",
                    "front_matter": {
                        "purpose": "Share authorization data.",
                        "authority": [
                            {
                                "reference": "OMB M-24-15",
                                "description": "Modernizing FedRAMP.",
                                "delegation": "FedRAMP Board"
                            },
                            {
                                "reference": "44 USC 3609",
                                "description": "FedRAMP statute."
                            }
                        ]
                    }
                },
                "data": {
                    "20x": {
                        "CSO": {
                            "FRR-ADS-01": {
                                "name": "Public Information",
                                "statement": "Providers MUST publish information.",
                                "primary_key_word": "MUST",
                                "timeframe_type": "days",
                                "timeframe_num": 30,
                                "following_information": ["Service name", "Service model"],
                                "following_information_bullets": ["Contact email"],
                                "terms": ["Cloud Service Offering", "CSO", "Agency", "Unknown Term"],
                                "fka": "FRR-ADS-OLD-01",
                                "fkas": ["FRR-ADS-OLDER-01"],
                                "affects": ["Providers"],
                                "examples": [
                                    {
                                        "id": "Example 1",
                                        "key_tests": ["Is it public?", "Is it current?"],
                                        "examples": ["A trust center page"]
                                    },
                                    {
                                        "id": "Example 2",
                                        "examples": ["A repository"]
                                    }
                                ],
                                "note": "Primary note.",
                                "notes": ["Second note.", "Third note."],
                                "notification": [
                                    {"party": "FedRAMP", "method": "email", "target": "info@fedramp.gov"},
                                    {"party": "Agencies", "method": "portal", "target": "USDA Connect"}
                                ],
                                "danger": "Data exposure",
                                "impact": {"low": True, "moderate": False, "high": True},
                                "reference": "ADS Guide",
                                "reference_url": "https://fedramp.gov/ads"
                            },
                            "FRR-ADS-02": {
                                "statement": "Providers SHOULD share data.",
                                "primary_key_word": "SHOULD",
                                "impact": "Moderate"
                            }
                        }
                    },
                    "rev5": {
                        "CSX": {
                            "FRR-ADS-01": {
                                "name": "Public Information (Rev5)",
                                "statement": "Providers MUST publish information for Rev5.",
                                "primary_key_word": "MUST"
                            }
                        }
                    }
                }
            },
            "VDR": {
                "info": {
                    "name": "Vulnerability Detection and Response",
                    "short_name": "VDR",
                    "front_matter": {}
                },
                "data": {
                    "both": {
                        "TFR": {
                            "FRR-VDR-TF-01": {
                                "name": "Remediation Timeframes",
                                "varies_by_level": {
                                    "low": {
                                        "statement": "Remediate within 30 days.",
                                        "primary_key_word": "MUST",
                                        "timeframe_type": "days",
                                        "timeframe_num": 30
                                    },
                                    "high": {
                                        "statement": "Remediate within 7 days.",
                                        "primary_key_word": "MUST"
                                    }
                                },
                                "terms": ["Incident Response"]
                            }
                        }
                    }
                }
            }
        },
        "KSI": {
            "IAM": {
                "id": "KSI-IAM",
                "name": "Identity and Access Management",
                "short_name": "IAM",
                "web_name": "identity-and-access-management",
                "theme": "Protect identities",
                "indicators": {
                    "KSI-IAM-01": {
                        "name": "Phishing-Resistant MFA",
                        "statement": "Enforce phishing-resistant MFA.",
                        "controls": ["ac-2", "ia-2", "ia-2.1"],
                        "terms": ["Agency", "Agencies"]
                    },
                    "KSI-IAM-02": {
                        "name": "Passwordless Authentication",
                        "statement": "Prefer passwordless methods.",
                        "controls": []
                    }
                }
            },
            "MLA": {
                "id": "KSI-MLA",
                "name": "Monitoring, Logging, and Auditing",
                "short_name": "MLA",
                "web_name": "monitoring-logging-and-auditing",
                "theme": "Observe everything",
                "indicators": {
                    "KSI-MLA-01": {
                        "fka": "KSI-MLA-OLD",
                        "name": "SIEM",
                        "statement": "Operate a SIEM.",
                        "controls": ["au-2"]
                    },
                    "KSI-MLA-02": {
                        "name": "Log Review",
                        "statement": "Review logs."
                    }
                }
            }
        }
    }


@pytest.fixture
def minimal_frmr():
    return build_minimal_frmr()


@pytest.fixture
def full_frmr():
    return build_full_frmr()


def iter_nodes(nodes):
    """Yield every group, control and part in a catalog tree"""
    for node in nodes:
        yield node
        for child_key in ("groups", "controls", "parts"):
            yield from iter_nodes(node.get(child_key, []))


def find_control(catalog, control_id):
    for node in iter_nodes(catalog["catalog"]["groups"]):
        if node.get("id") == control_id:
            return node
    raise KeyError(control_id)


def prop_values(node, name):
    return [prop["value"] for prop in node.get("props", []) if prop["name"] == name]
