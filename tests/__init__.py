"""
approvalflow tests

    conftest.py     shared fixtures: reference definition, actors, ids, clocks
    unit/           definition model, engine, repositories, services
    integration/    HTTP API and the validation script

Run with ``pytest`` from the repository root.
"""
