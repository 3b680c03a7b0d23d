"""
GigMaster Narrative Engine v1.0 - Scenario Templates
Setup sentences with %placeholder% tokens filled from per-family word
lists. A handful of patterns yields a very large space of surface text.
"""

import re
from typing import Optional

from dice import pick_one
from models import Choice, Event, make_event_id

PLACEHOLDER_RE = re.compile(r"%(\w+)%")
UNKNOWN_PLACEHOLDER = "something"


# ─────────────────────────────────────────────────────
# TEMPLATE FAMILIES
# ─────────────────────────────────────────────────────

SCENARIO_TEMPLATES = {
    "corruption_offer": {
        "setup_patterns": [
            "A %authority_figure% approaches you %location% and makes an offer.",
            "Your %business_contact% pulls you aside and suggests a %scheme_type%.",
            "After your show, a %mysterious_person% slips you a business card.",
            "During a meeting about %legitimate_business%, the conversation turns dark.",
        ],
        "words": {
            "authority_figure": ["record executive", "radio programmer", "venue owner", "booking agent", "promoter"],
            "location": ["backstage", "at a fancy restaurant", "in a parking garage", "in their office",
                         "at an industry party"],
            "scheme_type": ["payola scheme", "tax evasion plan", "drug distribution network",
                            "money laundering operation", "kickback arrangement"],
            "mysterious_person": ["well-dressed stranger", "person in expensive clothes",
                                  "someone with mob connections", "shadowy figure"],
            "legitimate_business": ["radio promotion", "tour booking", "album distribution", "merchandise deals"],
        },
    },
    "substance_temptation": {
        "setup_patterns": [
            "At the %venue_type%, someone offers your band %substance%.",
            "Your %band_member% comes to you with %substance% they got from %source%.",
            "The stress of %stressor% has your %band_member% asking about %substance%.",
            "After a %performance_type% performance, a %tempter% suggests celebrating with %substance%.",
        ],
        "words": {
            "substance": ["cocaine", "heroin", "prescription pills", "ecstasy", "methamphetamine"],
            "venue_type": ["dive bar", "warehouse rave", "underground club", "festival", "afterparty"],
            "band_member": ["guitarist", "bassist", "drummer", "keyboardist"],
            "source": ["a friend", "a dealer", "another band", "a groupie", "an industry contact"],
            "stressor": ["touring pressure", "creative block", "relationship problems", "financial stress",
                         "band conflict"],
            "performance_type": ["amazing", "disastrous", "mediocre", "legendary", "controversial"],
            "tempter": ["groupie", "industry insider", "rival band member", "venue regular", "tour manager"],
        },
    },
    "moral_crossroads": {
        "setup_patterns": [
            "You witness %witnessed_action% and must decide whether to %action_choice%.",
            "A %vulnerable_person% asks for your help with %problem%, but helping means %risk%.",
            "You have evidence of %crime_type% but revealing it would %consequence%.",
            "Someone you trust asks you to %unethical_action% for %justification%.",
        ],
        "words": {
            "witnessed_action": ["your manager stealing from the band", "a label executive harassing an intern",
                                 "drug dealing in your venue", "violence against a fan",
                                 "corruption in the industry"],
            "action_choice": ["intervene", "look the other way", "report it", "exploit it"],
            "vulnerable_person": ["young fan", "struggling musician", "abuse victim", "whistleblower", "intern"],
            "problem": ["harassment", "exploitation", "addiction", "financial trouble", "legal issues"],
            "risk": ["career damage", "industry retaliation", "legal trouble", "personal danger"],
            "crime_type": ["financial fraud", "sexual assault", "drug trafficking", "tax evasion",
                           "money laundering"],
            "consequence": ["destroy your career", "make powerful enemies", "endanger your safety",
                            "ruin relationships"],
            "unethical_action": ["lie to the police", "destroy evidence", "threaten a witness", "launder money",
                                 "cover up a crime"],
            "justification": ["loyalty", "money", "career protection", "fear", "power"],
        },
    },
    "faction_encounter": {
        "setup_patterns": [
            "A representative from the %faction% approaches you %location%.",
            "Your standing with the %faction% has opened new opportunities.",
            "Your reputation with the %faction% has created complications.",
            "The %faction% wants something from you in exchange for %benefit%.",
        ],
        "words": {
            "faction": ["underground scene", "industry insiders", "mainstream media", "law enforcement",
                        "criminal underworld"],
            "location": ["backstage", "at a meeting", "after a show", "in private"],
            "benefit": ["radio play", "venue access", "industry connections", "protection", "financial support"],
        },
    },
    "venue_incident": {
        "setup_patterns": [
            "At %venue_name%, %incident_type%.",
            "During your set at %venue_name%, %incident_type% and the show stops.",
            "After your performance at %venue_name%, %incident_type%.",
            "While setting up at %venue_name%, you find out %incident_type%.",
        ],
        "words": {
            "venue_name": ["the dive bar", "the warehouse", "the stadium", "the club", "the festival"],
            "incident_type": ["a fight breaks out", "someone collapses", "police arrive", "equipment fails",
                              "a fire starts", "someone gets arrested", "violence escalates"],
        },
    },
}

# Families the orchestrator draws from when it falls back to a template.
TEMPLATE_TYPES = ("corruption_offer", "substance_temptation", "moral_crossroads", "venue_incident")

TEMPLATE_CATEGORIES = {
    "corruption_offer": "criminal_activity",
    "substance_temptation": "substance_abuse",
    "moral_crossroads": "general",
    "faction_encounter": "general",
    "venue_incident": "violence",
}

TEMPLATE_TITLES = {
    "corruption_offer": "An Offer",
    "substance_temptation": "Temptation",
    "moral_crossroads": "A Choice",
    "faction_encounter": "Faction Contact",
    "venue_incident": "Venue Incident",
}


# ─────────────────────────────────────────────────────
# GENERATION
# ─────────────────────────────────────────────────────

def fill_pattern(pattern: str, words: dict, rng=None) -> str:
    """Replace each %token% left to right. Tokens without a word list become 'something'."""
    def substitute(match):
        options = words.get(match.group(1))
        return pick_one(options, rng) if options else UNKNOWN_PLACEHOLDER
    return PLACEHOLDER_RE.sub(substitute, pattern)


def _template_choices(template_name: str) -> list:
    if template_name == "substance_temptation":
        return [
            Choice(id="refuse", text="Refuse", risk_level="low",
                   psychological_effects={"moral_integrity": 10}),
            Choice(id="try_once", text="Try it once", risk_level="high",
                   immediate_effects={"creativity": 15, "stress": -20},
                   psychological_effects={"addiction_risk": 25, "moral_integrity": -10},
                   long_term_effects={"addiction_escalation": 0.3}),
            Choice(id="embrace", text="Embrace it", risk_level="extreme",
                   immediate_effects={"creativity": 25, "stress": -30},
                   psychological_effects={"addiction_risk": 40, "moral_integrity": -25},
                   long_term_effects={"addiction_escalation": 0.7}),
        ]
    return [
        Choice(id="ethical_choice", text="Take the ethical path", risk_level="low",
               psychological_effects={"moral_integrity": 15, "stress": 5}),
        Choice(id="pragmatic_choice", text="Be pragmatic", risk_level="medium",
               psychological_effects={"stress": 10}),
        Choice(id="corrupt_choice", text="Accept the offer", risk_level="high",
               psychological_effects={"moral_integrity": -20, "paranoia": 15, "stress": 15}),
    ]


def generate_from_template(template_name: str, game_state: dict = None,
                           context: dict = None, rng=None) -> Optional[Event]:
    template = SCENARIO_TEMPLATES.get(template_name)
    if template is None:
        return None

    pattern = pick_one(template["setup_patterns"], rng)
    return Event(
        id=make_event_id(f"template_{template_name}"),
        category=TEMPLATE_CATEGORIES.get(template_name, "general"),
        title=TEMPLATE_TITLES.get(template_name, "An Event"),
        maturity_level="mature",
        risk="medium",
        description=fill_pattern(pattern, template["words"], rng),
        choices=_template_choices(template_name),
        extra={"template": template_name, "pattern": pattern},
    )
