"""Script to validate a workflow definition document

Usage:
    python scripts/validate_workflow.py definitions/sow_approval.json
    python scripts/validate_workflow.py definitions/sow_approval.json --json
"""
import argparse
import json
import sys
from typing import Any, Dict, List, Optional

from approvalflow.domain.errors import InvalidDefinitionError
from approvalflow.domain.models import WorkflowDefinition
from approvalflow.engine.transition_resolver import TransitionResolver
from approvalflow.services.definition_loader import load_definition


def find_warnings(definition: WorkflowDefinition) -> List[str]:
    """Problems that do not make a definition invalid but are usually mistakes"""
    warnings = []
    
    reachable = definition.reachable_state_ids(definition.initial_state_id)
    for state_id in definition.states:
        if state_id not in reachable:
            warnings.append(f"State '{state_id}' is not reachable from '{definition.initial_state_id}'")
    
    for state_id, state in definition.states.items():
        if state_id == definition.final_state_id or state_id not in reachable:
            continue
        if definition.final_state_id not in definition.reachable_state_ids(state_id):
            kind = "Terminal state" if state.is_terminal else "State"
            warnings.append(f"{kind} '{state_id}' cannot lead to final state '{definition.final_state_id}'")
    
    used_roles = {r for s in definition.states.values() for a in s.actions for r in a.role_ids}
    for role_id in definition.roles:
        if role_id not in used_roles:
            warnings.append(f"Role '{role_id}' is not required by any action")
    
    used_stages = {s.stage_id for s in definition.states.values()}
    for stage_id in definition.stages:
        if stage_id not in used_stages:
            warnings.append(f"Stage '{stage_id}' has no states")
    
    return warnings


def print_analysis(definition: WorkflowDefinition, warnings: List[str]) -> None:
    resolver = TransitionResolver(definition)
    
    print(f"✅ Found workflow: {definition.title or definition.id}")
    print(f"   ID: {definition.id}")
    print()
    print("=" * 60)
    print("WORKFLOW ANALYSIS")
    print("=" * 60)
    print(f"\n📊 STATES: {len(definition.states)}")
    print(f"👥 ROLES: {', '.join(definition.roles)}")
    print(f"🚀 INITIAL STATE: {definition.initial_state_id}")
    print(f"🏁 FINAL STATE: {definition.final_state_id}")
    
    for stage_id, stage in definition.stages.items():
        print(f"\n[{stage.title}]")
        for state in definition.states_in_stage(stage_id):
            print(f"   • {state.title} ({state.id})")
            if state.is_terminal:
                print("      TERMINAL")
            for action in state.actions:
                print(f"      → {action.id}: {action.target_state_id} [{', '.join(action.role_ids)}]")
            incoming = resolver.get_incoming_actions(state.id)
            if incoming:
                print(f"      ← from: {', '.join(f'{src}.{a.id}' for src, a in incoming)}")
    
    if warnings:
        print("\n⚠️ WARNINGS:")
        for w in warnings:
            print(f"   • {w}")
        print("\n✅ WORKFLOW IS VALID (with warnings)")
    else:
        print("\n🎉 WORKFLOW IS VALID!")


def print_errors(errors: List[Dict[str, Any]], as_json: bool) -> None:
    if as_json:
        print(json.dumps({"is_valid": False, "errors": errors, "warnings": []}, indent=2))
        return
    print("❌ WORKFLOW HAS ERRORS")
    for err in errors:
        print(f"   • [{err['type']}] {err['message']} ({err['path']})")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Validate a workflow definition document")
    parser.add_argument("path", help="Path to a JSON workflow definition")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    args = parser.parse_args(argv)
    
    result: Dict[str, Any]
    try:
        definition = load_definition(args.path)
    except InvalidDefinitionError as e:
        print_errors(e.details.get("errors", []), args.json)
        return 1
    except OSError as e:
        print_errors([{"type": "UNREADABLE_FILE", "message": e.strerror or str(e), "path": args.path}], args.json)
        return 1
    
    warnings = find_warnings(definition)
    if args.json:
        result = {"is_valid": True, "errors": [], "warnings": warnings}
        print(json.dumps(result, indent=2))
    else:
        print_analysis(definition, warnings)
    return 0


if __name__ == "__main__":
    sys.exit(main())
