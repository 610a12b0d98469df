# Entry point: draw pools, print the schedule and the knockout bracket

import logging
import os
import random
import sys
import yaml
from bracket_engine.brackets import create_topology
from bracket_engine.models import Competitor, SetScore, SCHEDULED, slot_label
from bracket_engine.placements import stage_label
from bracket_engine.propagation import record_result
from bracket_engine.round_robin import pool_phase
from bracket_engine.seeding import draw_pools, describe_distribution
from bracket_engine.settings import load_settings, validate_settings
from bracket_engine.standings import all_pool_standings


def load_competitors(file_path):
    """Load the roster: a list of names, or of {name, seed} entries."""
    competitors = []
    with open(file_path, mode='r', encoding='utf-8') as file:
        entries = yaml.safe_load(file) or []
    for index, entry in enumerate(entries):
        if isinstance(entry, str):
            entry = {'name': entry}
        name = entry['name']
        competitors.append(Competitor(id=name, name=name, seed=int(entry.get('seed', index + 1))))
    return competitors


def random_scores(rng, settings):
    """A valid random result for the configured format; side A wins."""
    cap = settings['points_per_set']
    loser_points = rng.randint(0, cap - 2)
    if settings['sets_per_match'] == 1:
        return [SetScore(cap, loser_points)]
    return [SetScore(cap, loser_points), SetScore(cap, rng.randint(0, cap - 2))]


def play_all(matches, rng, settings):
    """Play every scheduled match, in match order, until none is left."""
    while True:
        ready = [m for m in matches if m.status == SCHEDULED]
        if not ready:
            return matches
        match = min(ready, key=lambda m: m.match_number)
        scores = random_scores(rng, settings)
        if rng.random() < 0.5:
            scores = [SetScore(s.b, s.a) for s in scores]
        matches = record_result(matches, match.id, scores, settings)


def print_matches(matches, names):
    current_round = None
    for match in matches:
        if match.round != current_round:
            current_round = match.round
            print(f"\n## Round {current_round}")
        court = f"court {match.court}" if match.court else "no court"
        label = stage_label(match.stage, match.placement_interval)
        print(f"  #{match.match_number:>3} [{court}] {label}: "
              f"{slot_label(match.slot_a, names)} vs {slot_label(match.slot_b, names)}")


def main():
    args = [a for a in sys.argv[1:] if not a.startswith('--')]
    flags = {a for a in sys.argv[1:] if a.startswith('--')}

    if '--verbose' in flags:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s %(name)s: %(message)s')

    script_dir = os.path.dirname(__file__)
    base_dir = os.path.dirname(script_dir)

    # Use command line arguments if provided, otherwise use default paths
    teams_file = args[0] if len(args) > 0 else os.path.join(base_dir, 'data', 'teams.yaml')
    settings_file = args[1] if len(args) > 1 else os.path.join(base_dir, 'data', 'settings.yaml')

    competitors = load_competitors(teams_file)
    settings = load_settings(settings_file)

    errors = validate_settings(settings)
    if errors:
        for error in errors:
            print(f"Invalid setting: {error}")
        return 1

    groups, result = draw_pools(competitors, settings['pool_size'], settings['seeding_method'])
    if not result.valid:
        print(f"Cannot draw pools: {result.error}")
        return 1

    names = {c.id: c.name for c in competitors}
    print(describe_distribution(len(competitors), settings['pool_size']))
    for group in groups:
        print(f"# {group.name}: {', '.join(names[m] for m in group.member_ids)}")

    pool_matches = pool_phase(groups, settings['number_of_courts'])
    print("\n--- Pool Phase ---")
    print_matches(pool_matches, names)

    topology = create_topology(settings['knockout_format'], len(groups), settings)
    skeleton = topology.placeholder()
    print(f"\n--- Knockout ({topology.name}, {len(skeleton)} matches) ---")
    print_matches(skeleton, names)

    if '--simulate' not in flags:
        return 0

    rng = random.Random(42)
    pool_matches = play_all(pool_matches, rng, settings)
    standings = all_pool_standings(groups, pool_matches, settings)
    populated = topology.populate(skeleton, standings, settings)
    for tie in populated.unresolved_ties:
        print(f"Unresolved tie for {tie.rank}. place at positions {tie.positions}: "
              f"{', '.join(names[c] for c in tie.competitor_ids)}")
    knockout = play_all(populated.matches, rng, settings)

    print("\n--- Final Placements ---")
    for placement in topology.placements(knockout, populated.eliminated_ids):
        print(f"  {placement.placement:<8} {names[placement.competitor_id]}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
