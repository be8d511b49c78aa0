from crease.engine.state import TeamSetup

MAX_OVERSEAS = 4
MAX_IMPACT_PLAYERS = 4


class TeamSetupValidator:
    @staticmethod
    def validate(setup: TeamSetup) -> dict:
        """
        Validate a team's match setup.

        Rules:
        1. Exactly 11 players in the XI
        2. Max 4 overseas players in the XI
        3. Max 4 impact players
        4. No player listed twice across XI and impact players
        """
        errors = []

        if len(setup.playing_xi) != 11:
            errors.append(f"Must select exactly 11 players, got {len(setup.playing_xi)}")

        overseas_count = setup.overseas_count
        if overseas_count > MAX_OVERSEAS:
            errors.append(f"Max {MAX_OVERSEAS} overseas players allowed, got {overseas_count}")

        if len(setup.impact_players) > MAX_IMPACT_PLAYERS:
            errors.append(
                f"Max {MAX_IMPACT_PLAYERS} impact players allowed, got {len(setup.impact_players)}"
            )

        ids = [p.id for p in setup.playing_xi + setup.impact_players]
        if len(ids) != len(set(ids)):
            errors.append("Each player can only be listed once")

        return {
            "valid": len(errors) == 0,
            "errors": errors,
            "breakdown": {
                "players": len(setup.playing_xi),
                "overseas": overseas_count,
                "impact_players": len(setup.impact_players),
            }
        }
