"""
Flask JSON API over the bracket engine.

The API is stateless: every request carries the matches it works on and
receives the new match set back.
"""
import os
import logging
from flask import Flask, request, jsonify
from bracket_engine.brackets import create_topology, expected_match_count, FORMATS
from bracket_engine.propagation import record_result, correct_result
from bracket_engine.round_robin import pool_phase
from bracket_engine.scoring import ScoreError, validate_scores
from bracket_engine.seeding import draw_pools, describe_distribution, validate
from bracket_engine.serialization import (
    competitor_from_dict, group_from_dict, group_to_dict, matches_from_list, matches_to_list,
    placement_to_dict, standings_from_dict, standings_to_dict, tie_to_dict,
)
from bracket_engine.settings import load_settings, merge_settings, validate_settings
from bracket_engine.standings import all_pool_standings
from bracket_engine.topology import TopologyError

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('BRACKET_DATA_DIR', os.path.join(BASE_DIR, 'data'))
SETTINGS_FILE = os.path.join(DATA_DIR, 'settings.yaml')

if not app.debug:
    app.logger.setLevel(logging.INFO)


def request_settings(payload):
    """Settings file defaults, overridden by the request's ``settings``."""
    settings = load_settings(SETTINGS_FILE)
    settings.update(payload.get('settings') or {})
    return merge_settings(settings)


def error_response(message, status=400):
    return jsonify({'success': False, 'error': message}), status


@app.errorhandler(ScoreError)
def handle_score_error(e):
    return error_response(str(e))


@app.errorhandler(TopologyError)
def handle_topology_error(e):
    app.logger.warning(f'Topology request rejected: {e}')
    return error_response(str(e))


@app.errorhandler(KeyError)
@app.errorhandler(TypeError)
@app.errorhandler(ValueError)
def handle_bad_payload(e):
    app.logger.info(f'Malformed request to {request.path}: {e!r}')
    return error_response(f'Malformed request: {e}')


@app.route('/api/formats')
def api_formats():
    """List the available knockout formats and the default settings."""
    return jsonify({'success': True, 'formats': list(FORMATS), 'settings': load_settings(SETTINGS_FILE)})


@app.route('/api/validate', methods=['POST'])
def api_validate():
    """Check whether a competitor count fits into pools."""
    payload = request.get_json(force=True)
    count = int(payload['count'])
    pool_size = int(payload.get('pool_size', 4))
    pool_count = payload.get('pool_count')
    result = validate(count, int(pool_count) if pool_count is not None else None, pool_size)
    return jsonify({
        'success': True,
        'valid': result.valid,
        'pool_count': result.pool_count,
        'byes_needed': result.byes_needed,
        'error': result.error,
        'description': describe_distribution(count, pool_size),
    })


@app.route('/api/pools', methods=['POST'])
def api_pools():
    """Draw pools for a roster and generate the pool phase."""
    payload = request.get_json(force=True)
    settings = request_settings(payload)
    errors = validate_settings(settings)
    if errors:
        return error_response('; '.join(errors))

    competitors = [competitor_from_dict(c, i) for i, c in enumerate(payload.get('competitors', []))]
    groups, result = draw_pools(competitors, settings['pool_size'], settings['seeding_method'])
    if not result.valid:
        return error_response(result.error)

    matches = pool_phase(groups, settings['number_of_courts'])
    app.logger.info(f'Drew {len(groups)} pools with {len(matches)} matches')
    return jsonify({
        'success': True,
        'groups': [group_to_dict(g) for g in groups],
        'byes_needed': result.byes_needed,
        'matches': matches_to_list(matches),
    })


@app.route('/api/standings', methods=['POST'])
def api_standings():
    """Pool standings from the matches played so far."""
    payload = request.get_json(force=True)
    settings = request_settings(payload)
    groups = [group_from_dict(g) for g in payload['groups']]
    matches = matches_from_list(payload.get('matches', []))
    return jsonify({'success': True, 'standings': standings_to_dict(all_pool_standings(groups, matches, settings))})


@app.route('/api/bracket/placeholder', methods=['POST'])
def api_bracket_placeholder():
    """Knockout skeleton before the pool phase is over."""
    payload = request.get_json(force=True)
    settings = request_settings(payload)
    knockout_format = payload.get('format', settings['knockout_format'])
    pool_count = int(payload['pool_count'])
    topology = create_topology(knockout_format, pool_count, settings)
    return jsonify({
        'success': True,
        'format': knockout_format,
        'expected_match_count': expected_match_count(knockout_format, pool_count, settings),
        'matches': matches_to_list(topology.placeholder()),
    })


@app.route('/api/bracket/populate', methods=['POST'])
def api_bracket_populate():
    """Fill a knockout skeleton from final pool standings."""
    payload = request.get_json(force=True)
    settings = request_settings(payload)
    knockout_format = payload.get('format', settings['knockout_format'])
    standings = standings_from_dict(payload['standings'])
    topology = create_topology(knockout_format, len(standings), settings)

    skeleton = payload.get('matches')
    matches = matches_from_list(skeleton) if skeleton else topology.placeholder()
    result = topology.populate(matches, standings, settings)
    if result.unresolved_ties:
        app.logger.warning(f'Bracket populated with {len(result.unresolved_ties)} unresolved ties')
    return jsonify({
        'success': True,
        'matches': matches_to_list(result.matches),
        'eliminated_ids': result.eliminated_ids,
        'unresolved_ties': [tie_to_dict(t) for t in result.unresolved_ties],
    })


@app.route('/api/bracket/placements', methods=['POST'])
def api_bracket_placements():
    """Final placements decided so far."""
    payload = request.get_json(force=True)
    settings = request_settings(payload)
    knockout_format = payload.get('format', settings['knockout_format'])
    topology = create_topology(knockout_format, int(payload['pool_count']), settings)
    matches = matches_from_list(payload['matches'])
    placements = topology.placements(matches, payload.get('eliminated_ids', []))
    return jsonify({'success': True, 'placements': [placement_to_dict(p) for p in placements]})


@app.route('/api/matches/<match_id>/result', methods=['POST'])
def api_record_result(match_id):
    """Record (or correct) a result and propagate it."""
    payload = request.get_json(force=True)
    settings = request_settings(payload)
    matches = matches_from_list(payload['matches'])
    if payload.get('correction'):
        updated = correct_result(matches, match_id, payload['scores'], settings)
    else:
        updated = record_result(matches, match_id, payload['scores'], settings)
    return jsonify({'success': True, 'matches': matches_to_list(updated)})


@app.route('/api/scores/validate', methods=['POST'])
def api_validate_scores():
    """Validate a score entry without recording it."""
    payload = request.get_json(force=True)
    settings = request_settings(payload)
    result = validate_scores(payload.get('scores', []), settings)
    return jsonify({'success': True, 'valid': result.valid, 'error': result.error})


if __name__ == '__main__':
    app.run(debug=True, port=5000)
