"""
GigMaster Narrative Engine v1.0 - Event Catalog
Character archetypes, the three base generators (substance, corruption,
horror) and the beat table: one authored builder per narrative beat id.

Choice long_term_effects carry the narrative hooks the session applies
when a choice is resolved:
  addiction_escalation  probability of starting/escalating the addiction arc
  corruption_escalation start/escalate the corruption arc
  recovery_path         record healthy coping
  relapse               addiction relapse (counters reset, stage kept)
  advance_arc           arc id to move to its next stage
  crisis                psychological crisis type
"""

import copy
import logging
from typing import Optional

from dice import pick_one
from models import Choice, Event, PsychologicalState, make_event_id
from arcs import addiction_tier, corruption_tier

logger = logging.getLogger("gigmaster.catalog")


# ─────────────────────────────────────────────────────
# CHARACTERS
# ─────────────────────────────────────────────────────

CHARACTER_ARCHETYPES = {
    "sleazy_manager": {
        "names": ["Slick Eddie Goldman", "Fast Tony Sterling", "Lucky Diamond", "Sharp Mickey Cross", "Big Sal Stone"],
        "traits": ["manipulative", "charismatic", "greedy", "connected"],
        "dialogues": [
            '"Trust me, kid, I know what I\'m talking about."',
            '"This is how the business works."',
            '"You scratch my back, I scratch yours."',
            '"Everybody wins in this deal."',
        ],
    },
    "drug_dealer": {
        "names": ["The Connection", "Marco", "Vince", "D", "Rex"],
        "traits": ["calculating", "dangerous", "business_minded", "territorial"],
        "dialogues": [
            '"First taste is free, after that we talk business."',
            '"I provide a service to creative people."',
            '"You want to reach new heights? I got your elevation."',
            '"Cash only, no questions, no problems."',
        ],
    },
    "obsessed_fan": {
        "names": ["Anonymous Admirer", "The One", "Your Shadow", "Forever Devoted", "Connected Soul"],
        "traits": ["unstable", "devoted", "intelligent", "dangerous"],
        "dialogues": [
            '"You saved my life with your music."',
            '"We\'re connected on a spiritual level."',
            '"I understand you better than anyone."',
            '"If I can\'t have you, no one can."',
        ],
    },
    "corrupt_cop": {
        "names": ["Detective Marcus", "Officer Walsh", "Sergeant Price", "Captain Collins", "Detective Blake"],
        "traits": ["authoritarian", "corruptible", "violent", "cynical"],
        "dialogues": [
            '"We can do this the easy way or the hard way."',
            '"I didn\'t see nothing if you didn\'t see nothing."',
            '"This badge gives me options you don\'t have."',
            '"Around here, I AM the law."',
        ],
    },
    "industry_executive": {
        "names": ["Richard Sterling", "David Chen", "Alexandra Moore", "James Mitchell", "Victoria Banks"],
        "traits": ["calculated", "powerful", "ruthless", "experienced"],
        "dialogues": [
            '"This is a business, not a hobby."',
            '"Your talent is valuable, but replaceable."',
            '"The market decides your worth."',
            '"Sign or walk, but don\'t waste my time."',
        ],
    },
}


def select_character(archetype: str, rng=None) -> dict:
    arch = CHARACTER_ARCHETYPES.get(archetype)
    if not arch:
        return {"name": "Unknown", "archetype": archetype, "traits": [], "dialogue": "You meet someone."}
    return {
        "name": pick_one(arch["names"], rng),
        "archetype": archetype,
        "traits": list(arch["traits"]),
        "dialogue": pick_one(arch["dialogues"], rng),
    }


# ─────────────────────────────────────────────────────
# BUILDING BLOCKS
# ─────────────────────────────────────────────────────

def _choice(cid: str, text: str, risk: str, psych: dict = None, immediate: dict = None,
            long_term: dict = None, trauma: dict = None, factions: dict = None) -> Choice:
    return Choice(
        id=cid, text=text, risk_level=risk,
        immediate_effects=dict(immediate or {}),
        long_term_effects=dict(long_term or {}),
        psychological_effects=dict(psych or {}),
        trauma_risk=dict(trauma) if trauma else None,
        faction_effects=dict(factions or {}),
    )


def _render(text: str, game_state: dict) -> str:
    game_state = game_state or {}
    venue = game_state.get("current_venue") or {}
    return (text
            .replace("{band}", game_state.get("band_name") or "the band")
            .replace("{venue}", venue.get("name") or "the venue"))


# ─────────────────────────────────────────────────────
# SUBSTANCE GENERATOR
# ─────────────────────────────────────────────────────

SUBSTANCE_TIERS = {
    "experimental": {
        "name": "First Hit", "substance": "cocaine", "risk": "high",
        "description": ("Your guitarist comes to you after the show, eyes dilated, movements jittery. "
                        "\"Dude, you HAVE to try this. I've never felt so... connected to the music.\" "
                        "They hold out a small baggie. Several industry people are watching."),
    },
    "regular_use": {
        "name": "The Routine", "substance": "cocaine", "risk": "high",
        "description": ("Your bassist casually leaves a small packet on the studio console. "
                        "\"For the long sessions,\" they say with a knowing smile. It's becoming normal now. "
                        "The sessions without it feel flat."),
    },
    "dependent": {
        "name": "Can't Stop", "substance": "various", "risk": "extreme",
        "description": ("You're shaking. The tour doesn't start for three days but you feel like you're "
                        "crawling out of your skin. You know exactly where to get what you need. "
                        "The only question is: do you reach out?"),
    },
    "addicted": {
        "name": "Rock Bottom", "substance": "heroin", "risk": "extreme",
        "description": ("You wake up in a bathroom you don't recognize. There's blood on your arm. "
                        "You can't remember last night. Your phone has 47 missed calls from increasingly "
                        "panicked band members and your manager."),
    },
}

_USE_CREATIVITY = {"experimental": 15, "regular_use": 12, "dependent": 10, "addicted": -5}
_USE_MORALITY = {"experimental": -10, "regular_use": -15, "dependent": -20, "addicted": -30}
_REFUSE_STRESS = {"dependent": 30, "addicted": 50}
_WITHDRAWAL = {"dependent": 0.6, "addicted": 0.8}


def generate_substance_event(stage: str = "experimental", psych: PsychologicalState = None,
                             rng=None) -> Event:
    """stage may be a generator tier or an addiction arc stage."""
    tier = stage if stage in SUBSTANCE_TIERS else addiction_tier(stage)
    tier_def = SUBSTANCE_TIERS[tier]
    addiction = psych.addiction_risk if psych is not None else 0
    appeal = {"experimental": addiction, "regular_use": min(100, addiction + 30),
              "dependent": min(100, addiction + 50), "addicted": 100}[tier]

    choices = [
        _choice("use_substance", f"\"I need this\" (Use {tier_def['substance']})", tier_def["risk"],
                psych={"addiction_risk": 30, "moral_integrity": _USE_MORALITY[tier]},
                immediate={"creativity": _USE_CREATIVITY[tier],
                           "energy": 20 if tier == "addicted" else 25, "stress": -25},
                long_term={"addiction_escalation": 0.25, "tolerance_increase": 0.15,
                           "health_degradation": 10},
                trauma={"type": "overdose_scare", "probability": 0.4, "severity": "severe",
                        "description": "Near-death experience from overdose"} if tier == "addicted" else None),
        _choice("refuse", "\"Not happening\"", "low",
                psych={"moral_integrity": 10},
                immediate={"stress": _REFUSE_STRESS.get(tier, 10)},
                long_term={"withdrawal_risk": _WITHDRAWAL.get(tier, 0)}),
        _choice("seek_help", "Call a support hotline", "low" if tier == "addicted" else "medium",
                psych={"stress": -20, "depression": -15},
                long_term={"recovery_path": True, "relapse_risk": -0.2}),
    ]
    return Event(
        id=make_event_id(f"substance_{tier}"),
        category="substance_abuse", title=tier_def["name"], maturity_level="mature",
        risk=tier_def["risk"], description=tier_def["description"],
        character=select_character("drug_dealer", rng), choices=choices,
        extra={"substance": tier_def["substance"], "appeal": appeal, "tier": tier},
    )


# ─────────────────────────────────────────────────────
# CORRUPTION GENERATOR
# ─────────────────────────────────────────────────────

CORRUPTION_TIERS = {
    "first_compromise": {
        "name": "The Offer", "money": 5000, "risk": "medium",
        "description": ("A smooth-talking executive takes you aside. \"Look, we want to add your song to "
                        "rotation, but radio doesn't work like it used to. There's a fee - $5000 upfront, "
                        "and we'll make sure you get heavy play.\""),
    },
    "moral_flexibility": {
        "name": "The Bigger Deal", "money": 50000, "risk": "high",
        "description": ("Your manager presents a new deal: $50,000 advance, but the label keeps 80% of "
                        "streaming revenue. \"Everyone does it this way,\" they say. You know it's predatory. "
                        "You also know you need the money."),
    },
    "active_corruption": {
        "name": "The Criminal Connection", "money": 100000, "risk": "extreme",
        "description": ("A man in expensive clothes approaches you after the show. \"Transport packages "
                        "during your tour. $10,000 per city, no questions asked.\" You know exactly what "
                        "this means."),
    },
    "deep_involvement": {
        "name": "The Point of No Return", "money": 500000, "risk": "extreme",
        "description": ("Your contact makes you an offer you can't refuse - literally. \"You're in this "
                        "with us now. We need guaranteed returns.\" The scheme would make you hundreds of "
                        "thousands and commit you to serious federal crimes."),
    },
}

_ACCEPT_MORALITY = {"first_compromise": -20, "moral_flexibility": -30, "active_corruption": -40,
                    "deep_involvement": -50}
_ACCEPT_PARANOIA = {"active_corruption": 30, "deep_involvement": 50}
_HEAT = {"active_corruption": 0.3, "deep_involvement": 0.8}
_CORRUPTION_CHARACTER = {"active_corruption": "drug_dealer", "deep_involvement": "corrupt_cop"}


def generate_corruption_event(stage: str = "first_compromise", rng=None) -> Event:
    """stage may be a generator tier or a corruption/fame arc stage."""
    tier = stage if stage in CORRUPTION_TIERS else corruption_tier(stage)
    tier_def = CORRUPTION_TIERS[tier]
    character = select_character(_CORRUPTION_CHARACTER.get(tier, "industry_executive"), rng)

    choices = [
        _choice("accept_deal", f"Accept (Get ${tier_def['money']})", tier_def["risk"],
                psych={"moral_integrity": _ACCEPT_MORALITY[tier],
                       "paranoia": _ACCEPT_PARANOIA.get(tier, 10), "stress": 15},
                immediate={"money": tier_def["money"]},
                long_term={"corruption_escalation": True,
                           "law_enforcement_attention": _HEAT.get(tier, 0.05)},
                factions={"criminal_underworld": 5, "law_enforcement": -5}),
        _choice("refuse", "Walk away", "low",
                psych={"moral_integrity": 15},
                long_term={"enemy": character["name"],
                           "enemy_type": "dangerous" if tier == "deep_involvement" else "business"}),
        _choice("report_authorities", "Report to authorities", "extreme",
                psych={"moral_integrity": 30, "paranoia": 40},
                long_term={"protection": "witness_protection", "career_impact": "severe"},
                factions={"law_enforcement": 15, "criminal_underworld": -25}),
    ]
    return Event(
        id=make_event_id(f"corruption_{tier}"),
        category="corruption", title=tier_def["name"], maturity_level="mature",
        risk=tier_def["risk"], description=tier_def["description"], character=character,
        choices=choices, extra={"tier": tier, "money": tier_def["money"]},
    )


# ─────────────────────────────────────────────────────
# HORROR GENERATOR
# ─────────────────────────────────────────────────────

HORRORS = [
    {
        "name": "The Shrine", "threat_level": "critical", "threat_type": "stalker",
        "description": ("A fan invites you to their apartment. The walls are covered in thousands of photos "
                        "of you, some taken with telephoto lenses from outside your home. A lock of hair in a "
                        "frame. \"We're meant to be together,\" they whisper as they lock the door."),
    },
    {
        "name": "The Voice", "threat_level": "severe", "threat_type": "psychotic_break",
        "description": ("You're alone in your hotel room when you hear it - whispers that aren't there. "
                        "The voice gets clearer: \"They don't really love you. When they find out who you "
                        "are, they'll leave. Everyone always does.\""),
    },
    {
        "name": "The Letter", "threat_level": "severe", "threat_type": "obsession",
        "description": ("A fan letter arrives that makes your blood run cold. They know details about your "
                        "childhood you've never spoken about publicly. They know where you live, what route "
                        "you take to the studio, what you ate for lunch yesterday."),
    },
    {
        "name": "The Overdose", "threat_level": "severe", "threat_type": "guilt_trauma",
        "description": ("During your show, a kid in the front row collapses - purple lips, not breathing. "
                        "They're wearing your merchandise. As the paramedics wheel them out, you realize "
                        "you've been glamorizing exactly this lifestyle."),
    },
]

STALKER_THREATS = ("stalker", "obsession")


def generate_horror_event(rng=None, threat_types: tuple = None) -> Event:
    """Uniform pick from the horror table, optionally limited to some threat types."""
    pool = [h for h in HORRORS if not threat_types or h["threat_type"] in threat_types] or HORRORS
    horror = pick_one(pool, rng)
    choices = [
        _choice("confront", "Confront directly", "extreme",
                psych={"stress": 40, "paranoia": 50 if horror["threat_type"] == "stalker" else 20},
                trauma={"type": horror["threat_type"], "probability": 0.6, "severity": "severe",
                        "description": horror["description"]}),
        _choice("seek_help", "Report to authorities", "high",
                psych={"stress": 20, "paranoia": 15},
                long_term={"legal_protection": True, "media_attention": True},
                factions={"law_enforcement": 5}),
        _choice("ignore", "Pretend it isn't happening", "extreme",
                psych={"depression": 30, "stress": 50},
                long_term={"problem_escalation": True}),
    ]
    return Event(
        id=make_event_id("horror"),
        category="psychological_horror", title=horror["name"], maturity_level="mature",
        risk="extreme", description=horror["description"], choices=choices,
        extra={"threat_level": horror["threat_level"], "threat_type": horror["threat_type"]},
    )


# ─────────────────────────────────────────────────────
# BEAT TABLE
# ─────────────────────────────────────────────────────

def _beat(title: str, category: str, maturity: str, risk: str, description: str,
          choices: list, character: str = None) -> dict:
    return {"title": title, "category": category, "maturity": maturity, "risk": risk,
            "description": description, "choices": choices, "character": character}


BEATS = {
    # Addiction spiral
    "first_hit": _beat(
        "First Hit", "substance_abuse", "mature", "high",
        "The green room at {venue} is thick with smoke. Someone you've never met cuts a line on the "
        "back of a setlist and slides it toward you. \"Everybody in {band} needs a little lift.\"",
        [
            _choice("try_it", "Try it, just this once", "high",
                    psych={"addiction_risk": 20, "moral_integrity": -10, "stress": -10},
                    immediate={"creativity": 10},
                    long_term={"addiction_escalation": 1.0}),
            _choice("pass", "Pass and head back to the van", "low",
                    psych={"moral_integrity": 5, "stress": 5}),
            _choice("take_for_later", "Pocket it for later", "medium",
                    psych={"addiction_risk": 10, "paranoia": 5}),
        ], character="drug_dealer"),
    "peer_pressure_drugs": _beat(
        "Everyone Else Is", "substance_abuse", "mature", "high",
        "After the set the whole crew is passing pills around. Your drummer rolls their eyes when you "
        "hesitate. \"Don't be the one who ruins the night.\"",
        [
            _choice("join_in", "Join in so nobody feels judged", "high",
                    psych={"addiction_risk": 15, "moral_integrity": -5, "stress": -5},
                    long_term={"addiction_escalation": 0.5}),
            _choice("diplomatic_exit", "Make a diplomatic exit", "low",
                    psych={"stress": 5}),
            _choice("call_it_out", "Call it out in front of everyone", "medium",
                    psych={"moral_integrity": 10, "stress": 10},
                    immediate={"band_morale": -10}),
        ]),
    "party_drugs": _beat(
        "Afterparty", "substance_abuse", "mature", "medium",
        "The afterparty spills into a warehouse two blocks from {venue}. Bass rattles the windows and a "
        "stranger presses a small tablet into your hand.",
        [
            _choice("take_it", "Swallow it and dance", "high",
                    psych={"addiction_risk": 15, "stress": -15, "depression": 5},
                    long_term={"addiction_escalation": 0.4}),
            _choice("drop_it", "Drop it on the floor", "low",
                    psych={"moral_integrity": 5}),
            _choice("leave_party", "Leave the party early", "low",
                    psych={"stress": 5},
                    immediate={"fame": -2}),
        ], character="drug_dealer"),
    "hiding_usage": _beat(
        "Hiding It", "substance_abuse", "mature", "high",
        "Your bassist walks in while you're putting something away. They don't say anything. "
        "They don't have to.",
        [
            _choice("lie", "Lie about what they saw", "high",
                    psych={"moral_integrity": -10, "paranoia": 10},
                    long_term={"addiction_escalation": 0.3}),
            _choice("come_clean", "Come clean and ask for help", "medium",
                    psych={"stress": 10, "moral_integrity": 10, "depression": -5},
                    long_term={"recovery_path": True}),
            _choice("deflect", "Change the subject and avoid them", "medium",
                    psych={"paranoia": 5, "stress": 5}),
        ]),
    "withdrawal_symptoms": _beat(
        "The Shakes", "substance_abuse", "mature", "extreme",
        "Soundcheck at {venue} and your hands won't stop shaking. The sweat won't stop either. "
        "Your dealer is one text away.",
        [
            _choice("text_dealer", "Send the text", "extreme",
                    psych={"addiction_risk": 20, "stress": -20, "moral_integrity": -10},
                    long_term={"addiction_escalation": 0.8}),
            _choice("push_through", "Push through the set", "high",
                    psych={"stress": 25, "depression": 10},
                    immediate={"performance": -15}),
            _choice("cancel_show", "Cancel the show and recover", "medium",
                    psych={"stress": 10},
                    immediate={"money": -500, "fame": -5},
                    long_term={"recovery_path": True}),
        ], character="drug_dealer"),
    "rock_bottom": _beat(
        "Rock Bottom", "substance_abuse", "mature", "extreme",
        "You come to on the floor of a motel bathroom. The tour manager is pounding on the door. "
        "The last three days are gone. Whatever {band} was, this is what it has become.",
        [
            _choice("keep_using", "Numb it. One more, then you'll deal with it", "extreme",
                    psych={"addiction_risk": 25, "depression": 20, "moral_integrity": -15},
                    long_term={"addiction_escalation": 1.0},
                    trauma={"type": "overdose_scare", "probability": 0.5, "severity": "critical",
                            "description": "Nearly didn't wake up"}),
            _choice("ask_for_help", "Open the door and ask for help", "medium",
                    psych={"stress": 15, "depression": -10, "moral_integrity": 10},
                    long_term={"recovery_path": True, "advance_arc": "addiction_spiral"}),
            _choice("disappear", "Climb out the window and disappear for a week", "high",
                    psych={"depression": 25, "paranoia": 15},
                    immediate={"fame": -10, "band_morale": -20}),
        ]),
    "overdose": _beat(
        "Overdose", "substance_abuse", "mature", "extreme",
        "Your lips are blue when the paramedics reach you. The naloxone burns. When the world comes back, "
        "your guitarist is crying in the corner of the ambulance.",
        [
            _choice("check_into_rehab", "Check into rehab from the hospital", "medium",
                    psych={"stress": 10, "depression": 10, "addiction_risk": -15},
                    immediate={"money": -3000},
                    long_term={"recovery_path": True, "advance_arc": "addiction_spiral"}),
            _choice("discharge_yourself", "Discharge yourself against advice", "extreme",
                    psych={"addiction_risk": 10, "depression": 15},
                    trauma={"type": "overdose", "probability": 0.7, "severity": "critical",
                            "description": "Survived an overdose"}),
            _choice("blame_the_batch", "Tell everyone it was a bad batch", "high",
                    psych={"moral_integrity": -10, "paranoia": 10}),
        ]),
    "arrest": _beat(
        "Busted", "criminal_activity", "mature", "high",
        "Blue lights fill the tour van. The officer finds what's in your bag in under a minute. "
        "Your bandmates stare at you as the cuffs go on.",
        [
            _choice("cooperate", "Cooperate fully", "medium",
                    psych={"stress": 20, "moral_integrity": 5},
                    immediate={"money": -2000, "fame": -10},
                    factions={"law_enforcement": 10, "criminal_underworld": -15}),
            _choice("name_supplier", "Give up your supplier for a deal", "high",
                    psych={"paranoia": 30, "moral_integrity": -5},
                    factions={"law_enforcement": 20, "criminal_underworld": -40}),
            _choice("resist", "Resist and run", "extreme",
                    psych={"stress": 35, "paranoia": 20},
                    immediate={"fame": -20},
                    factions={"law_enforcement": -30},
                    trauma={"type": "violent_arrest", "probability": 0.5, "severity": "severe",
                            "description": "Tackled on the highway shoulder"}),
        ], character="corrupt_cop"),
    "band_ultimatum": _beat(
        "The Ultimatum", "band_management", "mature", "high",
        "The rest of {band} is waiting in the rehearsal room, arms folded. \"Get clean or we replace you. "
        "We're done watching this.\"",
        [
            _choice("agree_to_rehab", "Agree to get clean", "medium",
                    psych={"stress": 15, "moral_integrity": 10},
                    long_term={"recovery_path": True, "advance_arc": "addiction_spiral"}),
            _choice("fight_back", "Fight back and call them hypocrites", "high",
                    psych={"stress": 20, "paranoia": 10},
                    immediate={"band_morale": -30}),
            _choice("walk_out", "Walk out on the band", "extreme",
                    psych={"depression": 30, "addiction_risk": 10},
                    immediate={"band_morale": -50, "fame": -15}),
        ]),
    "health_crisis": _beat(
        "Warning Signs", "substance_abuse", "mature", "high",
        "The doctor doesn't sugarcoat it. Your heart is already showing damage. \"Keep this up and you "
        "won't see thirty.\"",
        [
            _choice("listen", "Listen, and start treatment", "low",
                    psych={"stress": 10, "addiction_risk": -10},
                    immediate={"money": -1500},
                    long_term={"recovery_path": True}),
            _choice("ignore_doctor", "Ignore it, the tour comes first", "extreme",
                    psych={"addiction_risk": 10, "depression": 10},
                    immediate={"health": -20}),
            _choice("second_opinion", "Get a second opinion", "medium",
                    psych={"paranoia": 5},
                    immediate={"money": -500}),
        ]),
    "family_intervention": _beat(
        "Intervention", "psychological_themes", "mature", "high",
        "Your mother, your sister and your oldest friend are in your living room with a counselor. "
        "They've written letters. They want to read them to you.",
        [
            _choice("listen_to_letters", "Sit down and listen", "medium",
                    psych={"stress": 10, "depression": -10, "moral_integrity": 10},
                    long_term={"recovery_path": True, "advance_arc": "addiction_spiral"}),
            _choice("storm_out", "Storm out", "high",
                    psych={"depression": 20, "paranoia": 10}),
            _choice("promise_change", "Promise to change without committing", "medium",
                    psych={"moral_integrity": -5, "stress": 5}),
        ]),
    "band_intervention": _beat(
        "The Band Steps In", "band_management", "mature", "high",
        "The band cancels the next three dates without asking you. A rehab brochure is taped to your amp.",
        [
            _choice("accept_help", "Accept their help", "low",
                    psych={"stress": -5, "depression": -10},
                    immediate={"money": -1000},
                    long_term={"recovery_path": True, "advance_arc": "addiction_spiral"}),
            _choice("rage", "Rage at them for sabotaging the tour", "high",
                    psych={"stress": 20},
                    immediate={"band_morale": -25}),
            _choice("pretend", "Pretend to go along with it", "medium",
                    psych={"moral_integrity": -10, "paranoia": 5}),
        ]),
    "rehab_entry": _beat(
        "Check-In", "psychological_themes", "mature", "medium",
        "The intake nurse takes your phone and your shoelaces. Twenty-eight days. The door clicks shut.",
        [
            _choice("commit", "Commit to the program", "low",
                    psych={"stress": 10, "addiction_risk": -20, "depression": -5},
                    immediate={"money": -5000},
                    long_term={"recovery_path": True}),
            _choice("sign_out", "Sign yourself out on day three", "high",
                    psych={"addiction_risk": 10, "depression": 15},
                    long_term={"relapse": True}),
            _choice("go_through_motions", "Go through the motions", "medium",
                    psych={"addiction_risk": -5}),
        ]),
    "therapy_start": _beat(
        "First Session", "psychological_themes", "teen", "low",
        "The therapist's office smells like tea and old books. \"Where would you like to start?\"",
        [
            _choice("open_up", "Open up about everything", "low",
                    psych={"stress": -10, "depression": -15, "paranoia": -5},
                    immediate={"money": -200},
                    long_term={"recovery_path": True}),
            _choice("small_talk", "Keep it to small talk", "low",
                    psych={"stress": -2},
                    immediate={"money": -200}),
            _choice("never_return", "Leave and never come back", "medium",
                    psych={"depression": 5}),
        ]),
    "relapse_trigger": _beat(
        "Old Friends", "substance_abuse", "mature", "high",
        "Ninety days clean. Then your old dealer turns up at {venue}, all smiles. \"Missed you. "
        "Welcome back present?\"",
        [
            _choice("relapse", "Just one, for old times' sake", "extreme",
                    psych={"addiction_risk": 20, "moral_integrity": -10},
                    long_term={"relapse": True}),
            _choice("call_sponsor", "Call your sponsor", "low",
                    psych={"stress": 5, "addiction_risk": -5},
                    long_term={"recovery_path": True}),
            _choice("walk_away", "Walk away without a word", "low",
                    psych={"stress": 10, "moral_integrity": 5}),
        ], character="drug_dealer"),
    "sobriety_celebration": _beat(
        "One Year", "psychological_themes", "teen", "low",
        "Your sponsor hands you a one-year chip. The rest of {band} made a cake. It's lopsided and "
        "it's the best thing you've ever tasted.",
        [
            _choice("give_speech", "Give a speech and thank them", "low",
                    psych={"stress": -10, "depression": -10, "moral_integrity": 5}),
            _choice("sponsor_someone", "Offer to sponsor a newcomer", "low",
                    psych={"moral_integrity": 10, "stress": 5},
                    long_term={"recovery_path": True}),
            _choice("celebrate_wrong", "Celebrate with a drink. You've earned it", "high",
                    psych={"addiction_risk": 15},
                    long_term={"relapse": True}),
        ]),

    # Corruption path
    "the_offer": _beat(
        "The Offer", "corruption", "teen", "medium",
        "A programmer from the biggest station in town buys you a drink. \"Great single. Be a shame if "
        "nobody heard it. Five grand and it's in heavy rotation.\"",
        [
            _choice("pay_up", "Pay the fee", "medium",
                    psych={"moral_integrity": -15, "stress": 5},
                    immediate={"money": -5000, "fame": 15},
                    long_term={"corruption_escalation": True},
                    factions={"industry_insiders": 10, "underground_scene": -10}),
            _choice("decline", "Decline politely", "low",
                    psych={"moral_integrity": 5},
                    factions={"industry_insiders": -5, "underground_scene": 5}),
            _choice("record_them", "Record the conversation", "high",
                    psych={"paranoia": 15, "moral_integrity": 10},
                    factions={"law_enforcement": 5, "industry_insiders": -15}),
        ], character="industry_executive"),
    "small_bribe": _beat(
        "Cash Under the Table", "corruption", "teen", "medium",
        "The owner of {venue} says there's a better slot open Friday night. He rubs his fingers together.",
        [
            _choice("slip_cash", "Slip him two hundred", "medium",
                    psych={"moral_integrity": -10},
                    immediate={"money": -200, "fame": 5},
                    long_term={"corruption_escalation": True}),
            _choice("refuse_bribe", "Refuse and keep your slot", "low",
                    psych={"moral_integrity": 5}),
            _choice("expose_owner", "Tell the other bands about it", "medium",
                    psych={"moral_integrity": 10, "stress": 5},
                    factions={"underground_scene": 10}),
        ], character="sleazy_manager"),
    "the_contract": _beat(
        "The Contract", "corruption", "teen", "high",
        "The contract is ninety pages long. On page seventy-one, the label owns your name forever. "
        "The advance would clear every debt {band} has.",
        [
            _choice("sign_it", "Sign it", "high",
                    psych={"moral_integrity": -20, "stress": -10},
                    immediate={"money": 50000},
                    long_term={"corruption_escalation": True},
                    factions={"industry_insiders": 15, "underground_scene": -20}),
            _choice("negotiate", "Negotiate harder, even if they walk", "medium",
                    psych={"stress": 15},
                    factions={"industry_insiders": -5}),
            _choice("tear_it_up", "Tear it up", "low",
                    psych={"moral_integrity": 15},
                    factions={"underground_scene": 15, "industry_insiders": -15}),
        ], character="industry_executive"),
    "payola_scheme": _beat(
        "Pay to Play", "corruption", "mature", "high",
        "Your manager explains the arrangement: a cut of every show goes to three program directors, "
        "routed through a shell company. \"It's how everyone charts.\"",
        [
            _choice("join_scheme", "Join the scheme", "high",
                    psych={"moral_integrity": -25, "paranoia": 15},
                    immediate={"fame": 25},
                    long_term={"corruption_escalation": True, "law_enforcement_attention": 0.2},
                    factions={"industry_insiders": 15, "law_enforcement": -10}),
            _choice("fire_manager", "Fire your manager", "medium",
                    psych={"moral_integrity": 10, "stress": 20},
                    immediate={"money": -2000}),
            _choice("tip_off_press", "Tip off a journalist", "extreme",
                    psych={"moral_integrity": 15, "paranoia": 25},
                    factions={"mainstream_media": 20, "industry_insiders": -30}),
        ], character="sleazy_manager"),
    "blackmail": _beat(
        "Leverage", "criminal_activity", "mature", "extreme",
        "An envelope arrives with photos from a night you'd rather forget. A phone number is written "
        "on the back. \"Let's talk about your future.\"",
        [
            _choice("pay_blackmail", "Pay whatever they ask", "high",
                    psych={"paranoia": 25, "stress": 20},
                    immediate={"money": -10000}),
            _choice("go_to_police", "Go to the police", "high",
                    psych={"stress": 25, "moral_integrity": 10},
                    factions={"law_enforcement": 15, "criminal_underworld": -20}),
            _choice("turn_the_tables", "Dig up dirt on them in return", "extreme",
                    psych={"moral_integrity": -20, "paranoia": 20},
                    long_term={"corruption_escalation": True},
                    factions={"criminal_underworld": 10}),
        ], character="sleazy_manager"),
    "the_deal": _beat(
        "The Deal", "criminal_activity", "mature", "extreme",
        "Your tour bus would make a perfect courier. The men across the table aren't asking.",
        [
            _choice("agree", "Agree to carry the packages", "extreme",
                    psych={"moral_integrity": -40, "paranoia": 40},
                    immediate={"money": 100000},
                    long_term={"corruption_escalation": True, "law_enforcement_attention": 0.6},
                    factions={"criminal_underworld": 25, "law_enforcement": -25}),
            _choice("stall", "Stall for time", "high",
                    psych={"stress": 30, "paranoia": 20}),
            _choice("wear_a_wire", "Go to the feds and wear a wire", "extreme",
                    psych={"paranoia": 50, "moral_integrity": 20},
                    factions={"law_enforcement": 30, "criminal_underworld": -50},
                    trauma={"type": "informant_fear", "probability": 0.5, "severity": "severe",
                            "description": "Living as an informant"}),
        ], character="corrupt_cop"),
    "investigation": _beat(
        "Under Investigation", "criminal_activity", "mature", "extreme",
        "Two federal agents are waiting outside {venue}. They have bank records. They have names.",
        [
            _choice("cooperate_fully", "Cooperate and testify", "extreme",
                    psych={"paranoia": 40, "moral_integrity": 20},
                    factions={"law_enforcement": 30, "criminal_underworld": -50}),
            _choice("lawyer_up", "Say nothing and lawyer up", "high",
                    psych={"stress": 30},
                    immediate={"money": -20000}),
            _choice("destroy_evidence", "Destroy the evidence tonight", "extreme",
                    psych={"moral_integrity": -30, "paranoia": 30},
                    factions={"law_enforcement": -30, "criminal_underworld": 10}),
        ]),

    # Fame corruption
    "diva_behavior": _beat(
        "Rider Demands", "fame_scandal", "teen", "medium",
        "You catch yourself screaming at a runner because the green room has the wrong brand of water. "
        "A phone is recording.",
        [
            _choice("apologize", "Apologize to the runner", "low",
                    psych={"moral_integrity": 10, "stress": 5}),
            _choice("double_down", "Double down, you're the headliner", "medium",
                    psych={"moral_integrity": -10},
                    immediate={"fame": 5},
                    factions={"mainstream_media": 10, "underground_scene": -10}),
            _choice("buy_the_video", "Pay for the video to disappear", "medium",
                    psych={"paranoia": 10, "moral_integrity": -5},
                    immediate={"money": -2000}),
        ]),
    "burned_bridges": _beat(
        "Burned Bridges", "fame_scandal", "teen", "medium",
        "Your old bandmate's new record drops. The liner notes thank everyone except you. "
        "Nobody from the early days returns your calls anymore.",
        [
            _choice("reach_out", "Reach out and make amends", "low",
                    psych={"depression": -10, "moral_integrity": 10}),
            _choice("trash_them", "Trash them in an interview", "medium",
                    psych={"moral_integrity": -10},
                    factions={"mainstream_media": 10, "underground_scene": -15}),
            _choice("isolate", "Tell yourself you don't need anyone", "medium",
                    psych={"depression": 15, "paranoia": 5}),
        ]),
    "redemption_opportunity": _beat(
        "Second Chance", "general", "teen", "low",
        "A charity asks {band} to headline a benefit for addiction recovery. Your publicist thinks it's a "
        "bad look. Part of you thinks it's the only good thing left.",
        [
            _choice("play_benefit", "Play the benefit for free", "low",
                    psych={"moral_integrity": 20, "depression": -15, "stress": -5},
                    immediate={"money": -1000}),
            _choice("take_fee", "Play it, but take a fee", "medium",
                    psych={"moral_integrity": -5},
                    immediate={"money": 5000}),
            _choice("decline_benefit", "Decline", "low",
                    psych={"depression": 5}),
        ]),

    # Stalker obsession
    "fan_letter": _beat(
        "Fan Mail", "psychological_horror", "teen", "medium",
        "Forty pages, handwritten, perfumed. They've annotated every lyric {band} ever wrote. The last "
        "page says: \"See you soon.\"",
        [
            _choice("write_back", "Write back kindly", "medium",
                    psych={"paranoia": 5},
                    long_term={"advance_arc": "stalker_obsession"}),
            _choice("hand_to_security", "Hand it to security", "low",
                    psych={"stress": 5, "paranoia": 5}),
            _choice("ignore_letter", "Throw it away", "low",
                    psych={"stress": 2}),
        ], character="obsessed_fan"),
    "backstage_encounter": _beat(
        "Backstage Pass", "psychological_horror", "teen", "medium",
        "Nobody knows how they got backstage at {venue}. They know your dog's name.",
        [
            _choice("chat_politely", "Chat politely and sign something", "medium",
                    psych={"paranoia": 10},
                    long_term={"advance_arc": "stalker_obsession"}),
            _choice("call_security", "Call security", "low",
                    psych={"paranoia": 5, "stress": 5}),
            _choice("confront_fan", "Confront them about how they got in", "high",
                    psych={"stress": 15, "paranoia": 10}),
        ], character="obsessed_fan"),
    "the_shrine": _beat(
        "The Shrine", "psychological_horror", "mature", "extreme",
        "The address from the letters leads to a basement apartment. Inside, every wall is you. "
        "Photos through your bedroom window. A lock of hair. The door locks behind you.",
        [
            _choice("talk_them_down", "Stay calm and talk them down", "extreme",
                    psych={"stress": 35, "paranoia": 30},
                    trauma={"type": "stalker", "probability": 0.6, "severity": "critical",
                            "description": "Trapped in a stalker's shrine"}),
            _choice("break_out", "Fight your way out", "extreme",
                    psych={"stress": 40, "paranoia": 40},
                    trauma={"type": "stalker", "probability": 0.8, "severity": "severe",
                            "description": "Escaped a stalker's apartment"}),
            _choice("call_police_hidden", "Call the police from the bathroom", "high",
                    psych={"stress": 30, "paranoia": 25},
                    factions={"law_enforcement": 10},
                    long_term={"advance_arc": "stalker_obsession"}),
        ], character="obsessed_fan"),
    "restraining_order": _beat(
        "Restraining Order", "psychological_themes", "teen", "medium",
        "The judge signs the order. Five hundred feet. You still check the crowd at every show.",
        [
            _choice("get_therapy", "Talk to someone about the fear", "low",
                    psych={"paranoia": -15, "stress": -10},
                    long_term={"recovery_path": True}),
            _choice("hire_security", "Hire full-time security", "medium",
                    psych={"paranoia": -5},
                    immediate={"money": -8000}),
            _choice("go_public", "Tell the story publicly", "medium",
                    psych={"stress": 10},
                    factions={"mainstream_media": 15}),
        ]),

    # Contextual beats
    "dive_bar_brawl": _beat(
        "Bar Fight", "violence", "mature", "high",
        "Halfway through the second song at {venue}, a bottle flies. Then a chair. Then the whole room "
        "is swinging.",
        [
            _choice("keep_playing", "Keep playing through the chaos", "medium",
                    psych={"stress": 15},
                    immediate={"fame": 5}),
            _choice("jump_in", "Jump in and fight", "extreme",
                    psych={"stress": 20, "moral_integrity": -5},
                    immediate={"health": -15},
                    factions={"law_enforcement": -10, "underground_scene": 5},
                    trauma={"type": "assault", "probability": 0.3, "severity": "moderate",
                            "description": "Hurt in a bar fight"}),
            _choice("protect_gear", "Grab the gear and get out", "low",
                    psych={"stress": 10},
                    immediate={"money": -100}),
        ]),
    "festival_afterparty": _beat(
        "Festival Afterparty", "substance_abuse", "mature", "medium",
        "The artist compound after {venue} is a blur of glitter and headliners. A famous singer hands "
        "you a drink that tastes wrong.",
        [
            _choice("network", "Keep drinking and network", "high",
                    psych={"addiction_risk": 10, "stress": -10},
                    immediate={"fame": 10},
                    factions={"industry_insiders": 5}),
            _choice("pour_it_out", "Pour it out and stay sharp", "low",
                    psych={"moral_integrity": 5, "paranoia": 5}),
            _choice("go_home", "Go back to the tent", "low",
                    psych={"stress": -5}),
        ]),
    "debt_collector": _beat(
        "Collections", "criminal_activity", "teen", "high",
        "The man waiting by the van isn't from a bank. {band} owes money, and he's here to collect.",
        [
            _choice("sell_gear", "Sell gear to pay him off", "medium",
                    psych={"stress": 15, "depression": 10},
                    immediate={"money": 1500}),
            _choice("borrow_more", "Borrow from a worse lender", "high",
                    psych={"stress": 10, "paranoia": 15},
                    immediate={"money": 3000},
                    factions={"criminal_underworld": 5}),
            _choice("skip_town", "Skip town tonight", "high",
                    psych={"paranoia": 20},
                    factions={"criminal_underworld": -15}),
        ], character="sleazy_manager"),
    "burnout_warning": _beat(
        "Running on Empty", "psychological_themes", "teen", "medium",
        "You forget the words to your own song in the middle of the set. Afterwards you sit in the van "
        "for an hour without moving.",
        [
            _choice("take_a_week", "Take a week off to recover", "low",
                    psych={"stress": -20, "depression": -5},
                    immediate={"money": -500},
                    long_term={"recovery_path": True}),
            _choice("power_through", "Power through, the fans need you", "high",
                    psych={"stress": 15, "depression": 10}),
            _choice("self_medicate", "Find something to get you through", "high",
                    psych={"addiction_risk": 15, "stress": -15},
                    long_term={"addiction_escalation": 0.3}),
        ]),
    "label_pressure": _beat(
        "Label Notes", "band_management", "teen", "medium",
        "The label sends back the new record with notes: shorter songs, a feature with a pop star, and "
        "drop the track about your father.",
        [
            _choice("compromise", "Compromise on some of it", "medium",
                    psych={"stress": 5, "moral_integrity": -5},
                    factions={"industry_insiders": 10}),
            _choice("refuse_notes", "Refuse every note", "medium",
                    psych={"stress": 15, "moral_integrity": 10},
                    factions={"industry_insiders": -15, "underground_scene": 10}),
            _choice("cave", "Do everything they ask", "low",
                    psych={"moral_integrity": -15, "depression": 10},
                    immediate={"fame": 10},
                    factions={"industry_insiders": 15, "underground_scene": -15}),
        ], character="industry_executive"),
    "industry_party": _beat(
        "Industry Party", "general", "teen", "low",
        "A rooftop full of A&R reps, publicists and people who might be famous. Everyone wants five "
        "minutes with {band} tonight.",
        [
            _choice("work_the_room", "Work the room", "low",
                    psych={"stress": 10},
                    immediate={"fame": 5},
                    factions={"industry_insiders": 10}),
            _choice("stick_with_band", "Stick with the band in a corner", "low",
                    psych={"stress": -5},
                    factions={"underground_scene": 5}),
            _choice("leave_early", "Leave early", "low",
                    psych={"stress": -10}),
        ]),
    "viral_moment": _beat(
        "Going Viral", "fame_scandal", "teen", "medium",
        "A clip of you falling off the stage at {venue} has ten million views. Half the comments are "
        "cruel. The other half want tickets.",
        [
            _choice("own_it", "Own it and laugh along", "low",
                    psych={"stress": -5, "moral_integrity": 5},
                    immediate={"fame": 15},
                    factions={"mainstream_media": 10}),
            _choice("get_it_removed", "Try to get it taken down", "medium",
                    psych={"paranoia": 10, "stress": 10},
                    factions={"mainstream_media": -10}),
            _choice("stage_a_sequel", "Stage a sequel stunt", "high",
                    psych={"moral_integrity": -5},
                    immediate={"fame": 20, "health": -10},
                    factions={"mainstream_media": 15, "underground_scene": -10}),
        ]),
}


def has_beat(beat_id: str) -> bool:
    return beat_id in BEATS


def build_beat_event(beat_id: str, game_state: dict = None, rng=None) -> Optional[Event]:
    """Build the authored event for a beat id. None for unknown ids."""
    beat = BEATS.get(beat_id)
    if beat is None:
        return None
    character = select_character(beat["character"], rng) if beat["character"] else None
    return Event(
        id=make_event_id(beat_id),
        category=beat["category"],
        title=beat["title"],
        maturity_level=beat["maturity"],
        risk=beat["risk"],
        description=_render(beat["description"], game_state),
        character=character,
        choices=copy.deepcopy(beat["choices"]),
        extra={"beat": beat_id},
    )


# Arc -> generator used when a beat has no authored entry
ARC_FALLBACKS = {
    "addiction_spiral": "substance",
    "corruption_path": "corruption",
    "fame_corruption": "corruption",
    "stalker_obsession": "horror",
}


def generate_for_arc_stage(arc_id: str, stage: str, beat_id: str, game_state: dict = None,
                           psych: PsychologicalState = None, rng=None) -> Optional[Event]:
    event = build_beat_event(beat_id, game_state, rng)
    if event is not None:
        return event

    fallback = ARC_FALLBACKS.get(arc_id)
    logger.debug(f"No builder for beat {beat_id}, using {fallback} generator ({arc_id}/{stage})")
    if fallback == "substance":
        return generate_substance_event(stage, psych, rng)
    if fallback == "corruption":
        return generate_corruption_event(stage, rng)
    if fallback == "horror":
        return generate_horror_event(rng, STALKER_THREATS)
    return None
