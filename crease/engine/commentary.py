"""
Ball commentary.

Lines are picked deterministically from the ball position so the same match
always reads the same way.
"""
from typing import Optional

from crease.engine.state import BallEvent, ExtraType, Phase, Player

PHASE_PREFIXES = {
    Phase.POWERPLAY: ["Powerplay overs:", "Field restrictions on:"],
    Phase.MIDDLE: [""],
    Phase.DEATH: ["Death overs!", "Crunch time!", "Final push:"],
}

EXTRAS_LINES = {
    ExtraType.WIDE: [
        "Wide ball! {bowler} sprays it down the leg side.",
        "WIDE! {bowler} loses his line.",
        "{bowler} strays wide outside off. Umpire stretches his arms!",
    ],
    ExtraType.NO_BALL: [
        "NO BALL! {bowler} oversteps! Free hit coming up!",
        "Front foot no ball from {bowler}. Free hit next ball!",
        "Umpire checks... NO BALL! {bowler} crossed the line!",
    ],
    ExtraType.BYE: [
        "{runs} bye(s)! Beats the bat and the keeper.",
        "Misses everyone! {runs} bye(s) sneaked through.",
    ],
    ExtraType.LEG_BYE: [
        "{runs} leg bye(s)! Off the pads and away.",
        "Appeal for LBW... turned down! Leg byes taken.",
    ],
}

WICKET_LINES = [
    "OUT! {bowler} breaks through, {batsman} has to go!",
    "{batsman} GONE! {dismissal}! {bowler} celebrates wildly.",
    "BIG APPEAL! Finger goes up! {batsman} walks back.",
    "{bowler} STRIKES! {batsman} {dismissal}!",
    "{bowler} gets the breakthrough! {batsman} departs.",
]

RUN_LINES = {
    0: [
        "Tight from {bowler}. Dot ball.",
        "Beaten! {batsman} had no idea about that one.",
        "Good length, defended solidly. No run.",
        "{batsman} leaves it outside off.",
        "Pressure building, another dot ball!",
    ],
    1: [
        "{batsman} nudges it for a single.",
        "Quick single! Good running between the wickets.",
        "Worked off the pads for one.",
        "Guided to point, strike rotated.",
    ],
    2: [
        "{batsman} finds the gap, comes back for two.",
        "Excellent running! Two more to the total.",
        "Driven into the gap, two runs well judged.",
    ],
    3: [
        "THREE RUNS! {batsman} found the big gap.",
        "Deep in the outfield, they push for three!",
    ],
    4: [
        "FOUR! {batsman} threads the needle!",
        "Cracking cut shot! Races away to the fence.",
        "{bowler} errs in length and {batsman} punishes it. FOUR!",
        "Flick off the pads, races away for FOUR!",
    ],
    6: [
        "SIX! {batsman} launches it into the stands!",
        "{batsman} goes downtown! MAXIMUM!",
        "Short from {bowler}, pulled high and handsome for SIX!",
    ],
}

DISMISSAL_NAMES = {
    "bowled": "bowled",
    "caught": "caught",
    "lbw": "lbw",
    "caught_behind": "caught behind",
    "run_out": "run out",
    "stumped": "stumped",
}


def _pick(lines: list, index: int) -> str:
    return lines[index % len(lines)]


def milestone_note(batsman: Player, runs: int) -> str:
    """Fifty/hundred note when this ball took the batsman past the mark"""
    previous = batsman.runs - runs
    if previous < 100 <= batsman.runs:
        return f" CENTURY for {batsman.name}! What an innings!"
    if previous < 50 <= batsman.runs:
        return f" FIFTY up for {batsman.name}!"
    return ""


def chase_pressure(required_runs: Optional[int], balls_remaining: Optional[int]) -> str:
    if not required_runs or not balls_remaining:
        return ""

    required_rate = (required_runs / balls_remaining) * 6
    if balls_remaining <= 6:
        if required_runs <= 1:
            return " | One run needed!"
        return f" | Last over drama! {required_runs} off {balls_remaining}!"
    if balls_remaining <= 12:
        return f" | {required_runs} off {balls_remaining} balls. Nail-biter!"
    if required_rate > 12:
        return f" | {required_runs} needed, RRR {required_rate:.1f}"
    if required_runs <= 15:
        return f" | Just {required_runs} more needed!"
    return ""


def describe_ball(
    event: BallEvent,
    bowler: Player,
    batsman: Player,
    phase: Phase,
    required_runs: Optional[int] = None,
    balls_remaining: Optional[int] = None,
) -> str:
    """Commentary line for one delivery, e.g. '12.3 - FOUR! ...'"""
    index = event.over * 6 + event.ball
    prefix = _pick(PHASE_PREFIXES[phase], index)
    head = f"{event.over}.{event.ball} - " + (f"{prefix} " if prefix else "")
    names = {"bowler": bowler.name, "batsman": batsman.name}

    if event.extra is not None:
        line = _pick(EXTRAS_LINES[event.extra], index).format(runs=event.extra_runs, **names)
        if event.extra == ExtraType.NO_BALL and event.runs > 1:
            line += f" And {event.runs - 1} off the bat too!"
        return head + line + chase_pressure(required_runs, balls_remaining)

    if event.is_wicket:
        dismissal = DISMISSAL_NAMES.get(event.dismissal.value, "out") if event.dismissal else "out"
        line = _pick(WICKET_LINES, index).format(dismissal=dismissal, **names)
        if batsman.runs >= 50:
            line += f" A fine innings of {batsman.runs}({batsman.balls_faced}) ends."
        elif batsman.runs == 0:
            line += " Out for a duck."
        if bowler.wickets >= 3:
            line += f" That's {bowler.wickets} for {bowler.name} today."
        return head + line + chase_pressure(required_runs, balls_remaining)

    if event.was_free_hit and event.runs == 0:
        line = "Free hit, and nothing comes of it. Dot ball."
    else:
        line = _pick(RUN_LINES.get(event.runs, RUN_LINES[0]), index).format(**names)
    return head + line + milestone_note(batsman, event.runs) + chase_pressure(required_runs, balls_remaining)
