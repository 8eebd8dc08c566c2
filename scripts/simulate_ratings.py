#!/usr/bin/env python
"""Simulate users of known skill working through a challenge catalog.

Each synthetic user has a hidden true rating. A submission passes with the
Elo probability of that true rating beating the challenge's difficulty
seed, so the stored ratings should drift toward the hidden ones as the
engine recommends and rates challenges.
"""

import argparse
import asyncio
import random
import tempfile
from pathlib import Path

from dotenv import load_dotenv

from skillgate import SkillEngine
from skillgate.core.config import EngineConfig, RatingConfig
from skillgate.models import Challenge, Difficulty
from skillgate.ranking import calculate_expected_score
from skillgate.services.evaluation import EvaluationContext, Evaluator, Verdict

load_dotenv()

LANGUAGE = "python"
TRUE_RATINGS = {"novice": 950, "junior": 1150, "mid": 1300, "senior": 1500, "expert": 1700}
SUBMISSION = "def solve(items):\n    return sorted(items)\n"


class SimulatedEvaluator(Evaluator):
    """Passes with the Elo probability of the submitter's hidden rating."""

    name = "simulated"

    def __init__(self, rng: random.Random, rating_config: RatingConfig) -> None:
        self.rng = rng
        self.rating_config = rating_config
        self.true_rating = rating_config.default_rating

    async def evaluate(self, content: str, context: EvaluationContext) -> Verdict:
        challenge_rating = self.rating_config.seed_for(context.difficulty)
        p_pass = calculate_expected_score(self.true_rating, challenge_rating)
        passed = self.rng.random() < p_pass
        return Verdict(
            score=100 if passed else 0,
            passed=passed,
            feedback=f"simulated p_pass={p_pass:.2f}",
            evaluator_used=self.name,
        )


def build_catalog(per_tier: int) -> list[Challenge]:
    """Generic challenges spread evenly across difficulty tiers."""
    return [
        Challenge(
            id=f"{tier.value}-{i:02d}",
            title=f"{tier.value.title()} challenge {i}",
            language=LANGUAGE,
            difficulty=tier,
        )
        for tier in Difficulty
        for i in range(per_tier)
    ]


async def simulate(rounds: int, per_tier: int, seed: int, db_path: Path) -> None:
    """Run the simulation and print final ratings against hidden ones."""
    config = EngineConfig(database_url=f"sqlite:///{db_path}")
    evaluator = SimulatedEvaluator(random.Random(seed), config.rating)
    engine = SkillEngine(config, primary=evaluator)
    await engine.init_db()
    await engine.challenges.upsert_many(build_catalog(per_tier))

    try:
        for round_num in range(1, rounds + 1):
            for user_id, true_rating in TRUE_RATINGS.items():
                evaluator.true_rating = true_rating
                challenge = await engine.next_challenge(user_id, LANGUAGE)
                await engine.submit_attempt(user_id, SUBMISSION, challenge_id=challenge.id)

            if round_num % 10 == 0 or round_num == rounds:
                print(f"\nRound {round_num}")
                for user_id, true_rating in TRUE_RATINGS.items():
                    rating = await engine.get_skill_rating(user_id, LANGUAGE)
                    print(
                        f"  {user_id:<8} true={true_rating:>5}  "
                        f"rated={rating.rating:>5}  error={rating.rating - true_rating:>+5}"
                    )

        print("\nChallenge ratings")
        for challenge in build_catalog(per_tier):
            row = await engine.get_challenge_rating(challenge.id)
            print(
                f"  {challenge.id:<10} seed={config.rating.seed_for(challenge.difficulty):>5}  "
                f"rating={row.rating:>5}  attempts={row.attempts:>3}  passed={row.pass_count:>3}"
            )
    finally:
        await engine.close()


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--rounds", type=int, default=50)
    parser.add_argument("--per-tier", type=int, default=3)
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    with tempfile.TemporaryDirectory() as tmp:
        asyncio.run(simulate(args.rounds, args.per_tier, args.seed, Path(tmp) / "sim.db"))


if __name__ == "__main__":
    main()
