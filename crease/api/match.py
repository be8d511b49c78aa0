import logging
from typing import Dict, Optional

from fastapi import APIRouter, BackgroundTasks, HTTPException

from crease.config import settings
from crease.engine import match_controller as mc
from crease.engine.autopilot import nominate_super_over
from crease.engine.conditions import VENUES
from crease.engine.errors import InvalidSelection
from crease.engine.innings import Innings
from crease.engine.match_controller import Match, MatchStatus
from crease.engine.state import Player, PlayerForm, TeamSetup
from crease.engine.super_over import SuperOverNominees, resolve_super_over
from crease.engine.win_predictor import predict
from crease.services.stats_writer import save_match_stats
from crease.api.schemas import (
    CreateMatchRequest, TossRequest, StartInningsRequest, SelectPlayerRequest,
    ImpactPlayerRequest, SuperOverRequest, TeamSetupIn,
    MatchStateResponse, InningsStateResponse, PlayerStateBrief, BowlerStateBrief,
    AvailableBowlersResponse, BallResultResponse, SuperOverResponse, WinPredictionResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/match", tags=["Match"])

# In-memory store for active matches
active_matches: Dict[int, Match] = {}


def _get_match(match_id: int) -> Match:
    match = active_matches.get(match_id)
    if match is None:
        raise HTTPException(status_code=404, detail="Match not found")
    return match


def _to_team_setup(team: TeamSetupIn) -> TeamSetup:
    def to_player(p) -> Player:
        return Player(
            id=p.id,
            name=p.name,
            batting=p.batting,
            bowling=p.bowling,
            is_overseas=p.is_overseas,
            form=PlayerForm(
                recent_form=p.recent_form,
                last5_runs=p.last5_runs,
                last5_wickets=p.last5_wickets,
            ),
        )

    return TeamSetup(
        team_id=team.team_id,
        name=team.name,
        playing_xi=tuple(to_player(p) for p in team.playing_xi),
        impact_players=tuple(to_player(p) for p in team.impact_players),
    )


def _batter_brief(player: Optional[Player]) -> Optional[PlayerStateBrief]:
    if player is None:
        return None
    return PlayerStateBrief(
        id=player.id,
        name=player.name,
        runs=player.runs,
        balls=player.balls_faced,
        fours=player.fours,
        sixes=player.sixes,
        is_out=player.dismissed,
        dismissal=player.dismissal_info,
    )


def _bowler_brief(player: Optional[Player]) -> Optional[BowlerStateBrief]:
    if player is None:
        return None
    return BowlerStateBrief(
        id=player.id,
        name=player.name,
        overs=f"{player.legal_balls_bowled // 6}.{player.legal_balls_bowled % 6}",
        maidens=player.maidens,
        runs=player.runs_conceded,
        wickets=player.wickets,
        economy=round(player.economy, 2),
    )


def _innings_state(innings: Innings) -> InningsStateResponse:
    partnership = innings.active_partnership
    last = innings.last_event
    return InningsStateResponse(
        batting_team_id=innings.batting_team_id,
        bowling_team_id=innings.bowling_team_id,
        status=innings.status.value,
        runs=innings.total_runs,
        wickets=innings.wickets,
        overs=innings.overs_display,
        run_rate=round(innings.run_rate, 2),
        extras=innings.extras.total,
        target=innings.target,
        required_rate=round(innings.required_rate, 2) if innings.required_rate is not None else None,
        balls_remaining=innings.balls_remaining,
        striker=_batter_brief(innings.striker),
        non_striker=_batter_brief(innings.non_striker),
        bowler=_bowler_brief(innings.current_bowler),
        is_free_hit=innings.is_free_hit,
        phase=innings.phase.value,
        partnership_runs=partnership.runs if partnership else 0,
        this_over=[e.label for e in innings.this_over],
        fall_of_wickets=[
            f"{f.score}-{f.wicket_number} ({f.batsman_name}, {f.overs} ov)" for f in innings.fall_of_wickets
        ],
        last_ball_commentary=last.commentary if last else None,
    )


def _match_state(match: Match) -> MatchStateResponse:
    return MatchStateResponse(
        id=match.id,
        status=match.status.value,
        team1_id=match.team1.team_id,
        team1_name=match.team1.name,
        team2_id=match.team2.team_id,
        team2_name=match.team2.name,
        overs=match.overs,
        toss_winner_id=match.toss_winner_id,
        toss_choice=match.toss_choice,
        current_innings=match.current_innings,
        innings=_innings_state(match.innings) if match.innings else None,
        first_innings_score=match.first_innings.score_display if match.first_innings else None,
        second_innings_score=match.second_innings.score_display if match.second_innings else None,
        result=match.result,
        winner_id=match.winner_id,
        man_of_the_match_id=match.man_of_the_match_id,
    )


def _save_stats(match: Match):
    """Background task - failures are logged, never raised into the match"""
    report = save_match_stats(match)
    if not report.ok:
        logger.warning("Match %s: %s player stats need a manual retry", match.id, len(report.failed))


@router.post("", response_model=MatchStateResponse)
def create_match(request: CreateMatchRequest):
    """Create a match from two team setups"""
    venue = None
    if request.venue:
        venue = VENUES.get(request.venue)
        if venue is None:
            raise HTTPException(status_code=400, detail=f"Unknown venue '{request.venue}'")
    try:
        match = mc.create_match(
            _to_team_setup(request.team1),
            _to_team_setup(request.team2),
            overs=request.overs or settings.DEFAULT_OVERS,
            venue=venue,
        )
    except InvalidSelection as e:
        raise HTTPException(status_code=400, detail=e.reason)

    active_matches[match.id] = match
    return _match_state(match)


@router.get("/{match_id}", response_model=MatchStateResponse)
def get_match(match_id: int):
    return _match_state(_get_match(match_id))


@router.post("/{match_id}/toss", response_model=MatchStateResponse)
def do_toss(match_id: int, request: TossRequest):
    """Record the toss, or flip a coin when no winner is given"""
    match = _get_match(match_id)
    try:
        if request.winner_id is None:
            match = mc.random_toss(match, choice=request.elected_to)
        else:
            match = mc.record_toss(match, request.winner_id, request.elected_to or "bat")
    except InvalidSelection as e:
        raise HTTPException(status_code=400, detail=e.reason)

    active_matches[match_id] = match
    return _match_state(match)


@router.post("/{match_id}/innings/start", response_model=MatchStateResponse)
def start_innings(match_id: int, request: StartInningsRequest):
    """Start the first innings after the toss, or the chase after the break"""
    match = _get_match(match_id)
    try:
        if match.status == MatchStatus.INNINGS_BREAK:
            match = mc.start_second_innings(match, request.opener1_id, request.opener2_id)
        else:
            match = mc.start_first_innings(match, request.opener1_id, request.opener2_id)
    except InvalidSelection as e:
        raise HTTPException(status_code=400, detail=e.reason)

    active_matches[match_id] = match
    return _match_state(match)


@router.get("/{match_id}/bowlers", response_model=AvailableBowlersResponse)
def get_available_bowlers(match_id: int):
    match = _get_match(match_id)
    try:
        bowlers = mc.available_bowlers_for(match)
    except InvalidSelection as e:
        raise HTTPException(status_code=400, detail=e.reason)

    return AvailableBowlersResponse(
        bowlers=[_bowler_brief(b) for b in bowlers],
        message=None if bowlers else "No legal bowler available",
    )


@router.post("/{match_id}/bowler", response_model=MatchStateResponse)
def select_bowler(match_id: int, request: SelectPlayerRequest):
    match = _get_match(match_id)
    try:
        match = mc.select_bowler(match, request.player_id)
    except InvalidSelection as e:
        raise HTTPException(status_code=400, detail=e.reason)

    active_matches[match_id] = match
    return _match_state(match)


@router.post("/{match_id}/batsman", response_model=MatchStateResponse)
def select_batsman(match_id: int, request: SelectPlayerRequest):
    match = _get_match(match_id)
    try:
        match = mc.select_batsman(match, request.player_id)
    except InvalidSelection as e:
        raise HTTPException(status_code=400, detail=e.reason)

    active_matches[match_id] = match
    return _match_state(match)


@router.post("/{match_id}/ball", response_model=BallResultResponse)
def play_ball(match_id: int, background_tasks: BackgroundTasks):
    """Bowl the next ball; stats are saved in the background once a result is set"""
    match = _get_match(match_id)
    try:
        match, event = mc.simulate_next_ball(match)
    except InvalidSelection as e:
        raise HTTPException(status_code=400, detail=e.reason)

    active_matches[match_id] = match
    if match.is_finished:
        background_tasks.add_task(_save_stats, match)

    no_extra = event.extra is None and not event.is_wicket
    return BallResultResponse(
        outcome=event.label,
        runs=event.runs,
        is_wicket=event.is_wicket,
        is_boundary=no_extra and event.runs == 4,
        is_six=no_extra and event.runs == 6,
        commentary=event.commentary,
        match_state=_match_state(match),
    )


@router.post("/{match_id}/impact", response_model=MatchStateResponse)
def use_impact_player(match_id: int, request: ImpactPlayerRequest):
    match = _get_match(match_id)
    try:
        match = mc.use_impact_player_in_match(
            match, request.team_id, request.impact_player_id, request.replace_player_id
        )
    except InvalidSelection as e:
        raise HTTPException(status_code=400, detail=e.reason)

    active_matches[match_id] = match
    return _match_state(match)


@router.post("/{match_id}/super-over", response_model=SuperOverResponse)
def play_super_over(match_id: int, request: SuperOverRequest):
    """Resolve a tied match. Nominees default to each side's best players."""
    match = _get_match(match_id)
    if request.nominees:
        nominees = [SuperOverNominees(n.team_id, tuple(n.batsman_ids), n.bowler_id) for n in request.nominees]
    else:
        nominees = [nominate_super_over(match.team1), nominate_super_over(match.team2)]

    try:
        match, outcome = resolve_super_over(match, nominees)
    except InvalidSelection as e:
        raise HTTPException(status_code=400, detail=e.reason)

    active_matches[match_id] = match
    return SuperOverResponse(
        result=outcome.result,
        winner_id=outcome.winner_id,
        margin=outcome.margin,
        rounds=[f"{r.first_innings.score_display} v {r.second_innings.score_display}" for r in outcome.rounds],
        match_state=_match_state(match),
    )


@router.get("/{match_id}/prediction", response_model=WinPredictionResponse)
def get_prediction(match_id: int):
    prediction = predict(_get_match(match_id))
    if prediction is None:
        raise HTTPException(status_code=400, detail="Match has not started")

    return WinPredictionResponse(
        batting_team_id=prediction.batting_team_id,
        bowling_team_id=prediction.bowling_team_id,
        batting_probability=round(prediction.batting_probability, 1),
        bowling_probability=round(prediction.bowling_probability, 1),
        current_run_rate=prediction.current_run_rate,
        phase=prediction.phase.value,
        momentum=prediction.momentum,
        projected_score=prediction.projected_score,
        runs_required=prediction.runs_required,
        balls_remaining=prediction.balls_remaining,
        required_run_rate=prediction.required_run_rate,
    )
