#!/usr/bin/env python3
"""
CLI for the Crease ball-by-ball match engine
"""
import random
from collections import defaultdict

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.progress import track

from crease.config import settings, configure_logging
from crease.database import init_db, get_session
from crease.models import PlayerAllTimeStats
from crease.generators import SquadGenerator
from crease.engine.autopilot import play_match
from crease.engine.conditions import VENUES
from crease.engine.match_controller import latest_player_records
from crease.services.stats_writer import save_match_stats

console = Console()


@click.group()
@click.option("--log-level", default=None, help="Override LOG_LEVEL")
def cli(log_level):
    """Crease - ball-by-ball cricket match simulation"""
    configure_logging(log_level or "WARNING")


@cli.command()
def init():
    """Initialize the database"""
    console.print("[yellow]Initializing database...[/yellow]")
    init_db()
    console.print("[green]Database initialized successfully![/green]")


@cli.command()
@click.option("--overs", default=settings.DEFAULT_OVERS, help="Overs per innings")
@click.option("--seed", default=None, type=int, help="Random seed for a repeatable match")
@click.option("--venue", default=None, type=click.Choice(sorted(VENUES)), help="Venue preset")
@click.option("--commentary/--no-commentary", default=False, help="Print ball-by-ball commentary")
@click.option("--save", is_flag=True, help="Save player stats to the database")
def simulate(overs: int, seed: int, venue: str, commentary: bool, save: bool):
    """Simulate a match between two generated squads"""
    rng = random.Random(seed)
    team1, team2 = SquadGenerator(rng=rng, seed=seed).generate_fixture()

    for setup, style in ((team1, "cyan"), (team2, "magenta")):
        console.print(Panel(f"[bold {style}]{setup.name}[/bold {style}]"))
        for p in setup.playing_xi:
            flag = " (OS)" if p.is_overseas else ""
            console.print(f"  {p.name}{flag} - BAT: {p.batting}, BOWL: {p.bowling}")

    def on_ball(match, event):
        if commentary:
            console.print(event.commentary)

    console.print("\n[yellow]Simulating match...[/yellow]\n")
    match = play_match(team1, team2, overs, rng=rng, venue=VENUES.get(venue), on_ball=on_ball)

    console.print(Panel("[bold]Match Result[/bold]"))
    for innings in (match.first_innings, match.second_innings):
        name = match.team(innings.batting_team_id).name
        console.print(
            f"[cyan]{name}:[/cyan] {innings.score_display} ({innings.overs_display} overs)"
            f" - RR: {innings.run_rate:.2f}"
        )
    for round_ in match.super_overs:
        console.print(
            f"[yellow]Super Over {round_.number}:[/yellow] "
            f"{round_.first_innings.score_display} v {round_.second_innings.score_display}"
        )
    console.print(f"\n[bold green]{match.result}[/bold green]")

    if match.man_of_the_match_id is not None:
        motm = next(
            p for p in latest_player_records(match)
            if p.id == match.man_of_the_match_id
        )
        console.print(f"[bold]Man of the Match:[/bold] {motm.name}")

    console.print("\n[bold]First Innings Scorecard:[/bold]")
    _print_scorecard(match.first_innings)
    console.print("\n[bold]Second Innings Scorecard:[/bold]")
    _print_scorecard(match.second_innings)

    if save:
        init_db()
        report = save_match_stats(match)
        if report.ok:
            console.print(f"[green]Stats saved for {len(report.saved)} players[/green]")
        else:
            console.print(f"[red]Stats failed for players {report.failed}[/red]")


def _print_scorecard(innings):
    """Print innings scorecard"""
    # Batting
    bat_table = Table(title="Batting")
    bat_table.add_column("Batter", style="cyan")
    bat_table.add_column("Dismissal")
    bat_table.add_column("R", justify="right")
    bat_table.add_column("B", justify="right")
    bat_table.add_column("4s", justify="right")
    bat_table.add_column("6s", justify="right")
    bat_table.add_column("SR", justify="right")

    for batter in innings.batting_order:
        bat_table.add_row(
            batter.name,
            batter.dismissal_info if batter.dismissed else "not out",
            str(batter.runs),
            str(batter.balls_faced),
            str(batter.fours),
            str(batter.sixes),
            f"{batter.strike_rate:.1f}",
        )

    console.print(bat_table)
    extras = innings.extras
    console.print(
        f"Extras: {extras.total} (w {extras.wides}, nb {extras.no_balls}, b {extras.byes}, lb {extras.leg_byes})"
    )

    # Bowling
    bowl_table = Table(title="Bowling")
    bowl_table.add_column("Bowler", style="magenta")
    bowl_table.add_column("O", justify="right")
    bowl_table.add_column("M", justify="right")
    bowl_table.add_column("R", justify="right")
    bowl_table.add_column("W", justify="right")
    bowl_table.add_column("Econ", justify="right")

    for bowler in innings.bowling_card:
        bowl_table.add_row(
            bowler.name,
            f"{bowler.legal_balls_bowled // 6}.{bowler.legal_balls_bowled % 6}",
            str(bowler.maidens),
            str(bowler.runs_conceded),
            str(bowler.wickets),
            f"{bowler.economy:.1f}",
        )

    console.print(bowl_table)

    if innings.fall_of_wickets:
        fow = ", ".join(f"{f.score}-{f.wicket_number} ({f.batsman_name}, {f.overs})" for f in innings.fall_of_wickets)
        console.print(f"[bold]Fall of wickets:[/bold] {fow}")


@cli.command()
@click.option("--matches", default=100, help="Number of matches to simulate")
@click.option("--overs", default=settings.DEFAULT_OVERS, help="Overs per innings")
@click.option("--seed", default=None, type=int, help="Random seed")
def benchmark(matches: int, overs: int, seed: int):
    """Run multiple simulations to check scoring realism"""
    rng = random.Random(seed)
    generator = SquadGenerator(rng=rng, seed=seed)
    stats = defaultdict(list)

    console.print(f"[yellow]Running {matches} simulations...[/yellow]")

    for _ in track(range(matches), description="Simulating..."):
        team1, team2 = generator.generate_fixture()
        match = play_match(team1, team2, overs, rng=rng)

        stats["scores"].extend([match.first_innings.total_runs, match.second_innings.total_runs])
        stats["wickets"].extend([match.first_innings.wickets, match.second_innings.wickets])
        stats["chasing_wins"].append(1 if match.winner_id == match.second_innings.batting_team_id else 0)
        stats["super_overs"].append(1 if match.super_overs else 0)

    console.print(Panel("[bold]Simulation Statistics[/bold]"))

    scores = stats["scores"]
    console.print(f"[cyan]Average Score:[/cyan] {sum(scores) / len(scores):.1f}")
    console.print(f"[cyan]Min Score:[/cyan] {min(scores)}")
    console.print(f"[cyan]Max Score:[/cyan] {max(scores)}")
    console.print(f"[cyan]Average Wickets:[/cyan] {sum(stats['wickets']) / len(stats['wickets']):.1f}")
    console.print(f"[cyan]Chasing Win %:[/cyan] {sum(stats['chasing_wins']) / matches * 100:.1f}%")
    console.print(f"[cyan]Super Overs:[/cyan] {sum(stats['super_overs'])}")


@cli.command()
@click.option("--limit", default=20, help="Number of players to show")
def show_stats(limit: int):
    """Show all-time leading run scorers and wicket takers"""
    init_db()
    session = get_session()
    try:
        batters = session.query(PlayerAllTimeStats).order_by(PlayerAllTimeStats.total_runs.desc()).limit(limit).all()
        bowlers = session.query(PlayerAllTimeStats).order_by(PlayerAllTimeStats.total_wickets.desc()).limit(limit).all()

        if not batters:
            console.print("[red]No stats found. Run 'simulate --save' first.[/red]")
            return

        bat_table = Table(title="Most Runs")
        bat_table.add_column("Player", style="cyan")
        bat_table.add_column("Team")
        bat_table.add_column("M", justify="right")
        bat_table.add_column("Runs", justify="right", style="green")
        bat_table.add_column("HS", justify="right")
        bat_table.add_column("Avg", justify="right")
        bat_table.add_column("SR", justify="right")
        bat_table.add_column("50/100", justify="right")

        for row in batters:
            bat_table.add_row(
                row.player_name,
                row.team_name or "",
                str(row.matches_batted),
                str(row.total_runs),
                str(row.highest_score),
                f"{row.batting_average:.2f}",
                f"{row.strike_rate:.1f}",
                f"{row.fifties}/{row.hundreds}",
            )
        console.print(bat_table)

        bowl_table = Table(title="Most Wickets")
        bowl_table.add_column("Player", style="magenta")
        bowl_table.add_column("Team")
        bowl_table.add_column("M", justify="right")
        bowl_table.add_column("Wkts", justify="right", style="green")
        bowl_table.add_column("Best", justify="right")
        bowl_table.add_column("Econ", justify="right")
        bowl_table.add_column("Maidens", justify="right")

        for row in bowlers:
            if row.matches_bowled == 0:
                continue
            bowl_table.add_row(
                row.player_name,
                row.team_name or "",
                str(row.matches_bowled),
                str(row.total_wickets),
                row.best_bowling,
                f"{row.economy:.2f}",
                str(row.maidens),
            )
        console.print(bowl_table)
    finally:
        session.close()


if __name__ == "__main__":
    cli()
