"""
Venue, weather and pitch conditions, and the multipliers they feed into the
outcome model.
"""
from dataclasses import dataclass, field, replace
from typing import Optional

from crease.engine.probability import RandomSource, default_rng


@dataclass(frozen=True)
class Venue:
    id: str
    name: str
    city: str
    pitch_type: str = "balanced"  # "spin", "pace", "balanced"
    spin_friendliness: int = 50  # 0-100
    pace_friendliness: int = 50  # 0-100
    dew_factor: int = 50  # 0-100, higher = more dew in second innings
    boundary_size: str = "medium"  # "small", "medium", "large"
    avg_first_innings_score: int = 165

    # Typical weather
    match_time: str = "day-night"  # "day", "day-night", "night"
    avg_temperature: int = 30
    humidity: int = 60
    wind_speed: str = "moderate"  # "calm", "moderate", "windy"


VENUES = {
    "wankhede": Venue(
        "wankhede", "Wankhede Stadium", "Mumbai",
        pitch_type="balanced", spin_friendliness=45, pace_friendliness=65, dew_factor=70,
        boundary_size="medium", avg_first_innings_score=175,
        match_time="night", avg_temperature=31, humidity=75, wind_speed="moderate",
    ),
    "chinnaswamy": Venue(
        "chinnaswamy", "M. Chinnaswamy Stadium", "Bengaluru",
        pitch_type="pace", spin_friendliness=35, pace_friendliness=55, dew_factor=65,
        boundary_size="small", avg_first_innings_score=185,
        match_time="day-night", avg_temperature=27, humidity=55, wind_speed="calm",
    ),
    "chepauk": Venue(
        "chepauk", "M.A. Chidambaram Stadium", "Chennai",
        pitch_type="spin", spin_friendliness=80, pace_friendliness=35, dew_factor=75,
        boundary_size="large", avg_first_innings_score=165,
        match_time="night", avg_temperature=33, humidity=72, wind_speed="moderate",
    ),
    "eden": Venue(
        "eden", "Eden Gardens", "Kolkata",
        pitch_type="balanced", spin_friendliness=55, pace_friendliness=50, dew_factor=80,
        boundary_size="medium", avg_first_innings_score=170,
        match_time="day-night", avg_temperature=30, humidity=68, wind_speed="calm",
    ),
    "mohali": Venue(
        "mohali", "PCA Stadium", "Mohali",
        pitch_type="pace", spin_friendliness=30, pace_friendliness=75, dew_factor=40,
        boundary_size="large", avg_first_innings_score=168,
        match_time="day", avg_temperature=29, humidity=45, wind_speed="windy",
    ),
}


@dataclass(frozen=True)
class MatchConditions:
    weather: str = "sunny"  # sunny, partly-cloudy, overcast, drizzle, humid, windy, dew
    pitch: str = "flat"  # green, dry, dusty, flat, cracked, damp
    temperature: int = 30
    humidity: int = 50
    wind_speed: str = "moderate"  # calm, moderate, gusty, strong
    dew_factor: float = 0.0  # 0-100
    pitch_degradation: float = 0.0  # 0-100
    time_of_day: str = "evening"  # afternoon, evening, night


@dataclass(frozen=True)
class ConditionModifiers:
    boundary_multiplier: float = 1.0
    six_multiplier: float = 1.0
    pace_wicket_multiplier: float = 1.0
    spin_wicket_multiplier: float = 1.0
    extras_multiplier: float = 1.0
    dot_ball_multiplier: float = 1.0
    batting_advantage: str = "medium"  # low, medium, high
    bowling_advantage: str = "balanced"  # pace, spin, balanced
    notes: tuple = field(default_factory=tuple)


NEUTRAL_MODIFIERS = ConditionModifiers()


def generate_initial_conditions(venue: Venue, rng: RandomSource = None) -> MatchConditions:
    """Starting conditions for a match at this venue"""
    rng = rng or default_rng()
    time_of_day = {"day": "afternoon", "day-night": "evening"}.get(venue.match_time, "night")

    weather = "sunny"
    if venue.humidity > 70:
        weather = "dew" if time_of_day == "night" else "humid"
    elif venue.wind_speed == "windy":
        weather = "windy"
    elif venue.pace_friendliness > 60:
        weather = "overcast" if rng.random() > 0.5 else "partly-cloudy"

    pitch = "flat"
    if venue.pitch_type == "spin":
        pitch = "dusty" if venue.spin_friendliness > 70 else "dry"
    elif venue.pitch_type == "pace":
        pitch = "green" if venue.pace_friendliness > 70 else "damp"

    return MatchConditions(
        weather=weather,
        pitch=pitch,
        temperature=venue.avg_temperature,
        humidity=venue.humidity,
        wind_speed="gusty" if venue.wind_speed == "windy" else venue.wind_speed,
        dew_factor=venue.dew_factor,
        pitch_degradation=0.0,
        time_of_day=time_of_day,
    )


def evolve_conditions(
    conditions: MatchConditions,
    balls_bowled: int,
    is_second_innings: bool,
    overs: int = 20,
) -> MatchConditions:
    """Wear the pitch and bring in dew as the match progresses"""
    total_balls = overs * 6 * (2 if is_second_innings else 1)
    progress = min(balls_bowled / total_balls, 1) if total_balls else 1

    degradation = min(100.0, conditions.pitch_degradation + progress * 30)

    dew = conditions.dew_factor
    if is_second_innings and conditions.time_of_day in ("evening", "night"):
        dew = min(100.0, conditions.dew_factor + 20)

    weather = conditions.weather
    if is_second_innings and dew > 60:
        weather = "dew"

    pitch = conditions.pitch
    if degradation > 50 and conditions.pitch == "dry":
        pitch = "dusty"
    elif degradation > 70 and conditions.pitch == "flat":
        pitch = "cracked"

    return replace(
        conditions,
        weather=weather,
        pitch=pitch,
        dew_factor=dew,
        pitch_degradation=degradation,
    )


def calculate_modifiers(conditions: MatchConditions, venue: Optional[Venue] = None) -> ConditionModifiers:
    """Fold weather, pitch, wear and boundary size into outcome multipliers"""
    notes = []
    m = {
        "boundary": 1.0, "six": 1.0,
        "pace_wicket": 1.0, "spin_wicket": 1.0,
        "extras": 1.0, "dot": 1.0,
    }

    weather = conditions.weather
    if weather == "sunny":
        m["boundary"] *= 1.1
        m["six"] *= 1.15
        notes.append("Clear conditions favor batsmen")
    elif weather == "overcast":
        m["pace_wicket"] *= 1.25
        m["dot"] *= 1.15
        notes.append("Overcast skies - ball swinging!")
    elif weather == "partly-cloudy":
        notes.append("Some swing on offer")
    elif weather == "drizzle":
        m["extras"] *= 1.3
        m["dot"] *= 1.2
        m["boundary"] *= 0.9
        notes.append("Slippery conditions affecting grip")
    elif weather == "humid":
        if conditions.humidity > 80:
            notes.append("Reverse swing possible in humid conditions")
    elif weather == "windy":
        m["six"] *= 0.75 if conditions.wind_speed == "strong" else 0.9
        m["extras"] *= 1.15
        notes.append("Wind affecting ball flight")
    elif weather == "dew":
        m["spin_wicket"] *= 0.7
        m["boundary"] *= 1.15
        m["extras"] *= 1.2
        notes.append("Dew making ball slippery - tough for bowlers")

    pitch = conditions.pitch
    if pitch == "green":
        m["pace_wicket"] *= 1.35
        m["boundary"] *= 0.9
        notes.append("Green top assisting seamers")
    elif pitch == "dry":
        m["spin_wicket"] *= 1.2
        notes.append("Dry surface offering turn")
    elif pitch == "dusty":
        m["spin_wicket"] *= 1.45
        m["dot"] *= 1.2
        notes.append("Dusty pitch - spinners in paradise!")
    elif pitch == "flat":
        m["boundary"] *= 1.2
        m["six"] *= 1.25
        m["dot"] *= 0.85
        notes.append("Flat deck - batting paradise")
    elif pitch == "cracked":
        m["spin_wicket"] *= 1.3
        m["pace_wicket"] *= 1.15
        m["extras"] *= 1.1
        notes.append("Cracks appearing - variable bounce!")
    elif pitch == "damp":
        m["pace_wicket"] *= 1.2
        m["boundary"] *= 0.85
        notes.append("Damp pitch - seam movement early on")

    if conditions.pitch_degradation > 50:
        m["spin_wicket"] *= 1.1
        notes.append("Pitch wearing - spin coming into play")
    if conditions.pitch_degradation > 75:
        m["spin_wicket"] *= 1.15
        notes.append("Pitch breaking up significantly")

    if venue is not None:
        if venue.boundary_size == "small":
            m["boundary"] *= 1.2
            m["six"] *= 1.3
            notes.append("Short boundaries in play")
        elif venue.boundary_size == "large":
            m["boundary"] *= 0.85
            m["six"] *= 0.8
            m["dot"] *= 1.1
            notes.append("Large boundaries testing batsmen")

    if pitch == "flat" or m["boundary"] > 1.15:
        batting_advantage = "high"
    elif m["pace_wicket"] > 1.2 or m["spin_wicket"] > 1.2:
        batting_advantage = "low"
    else:
        batting_advantage = "medium"

    if m["pace_wicket"] > m["spin_wicket"] + 0.15:
        bowling_advantage = "pace"
    elif m["spin_wicket"] > m["pace_wicket"] + 0.15:
        bowling_advantage = "spin"
    else:
        bowling_advantage = "balanced"

    return ConditionModifiers(
        boundary_multiplier=m["boundary"],
        six_multiplier=m["six"],
        pace_wicket_multiplier=m["pace_wicket"],
        spin_wicket_multiplier=m["spin_wicket"],
        extras_multiplier=m["extras"],
        dot_ball_multiplier=m["dot"],
        batting_advantage=batting_advantage,
        bowling_advantage=bowling_advantage,
        notes=tuple(notes[:3]),
    )
