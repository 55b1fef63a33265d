"""
Scripts Module

Utility scripts for working with workflow definition documents.

Available scripts:
    - validate_workflow.py: Validates a definition and prints its graph
    
Usage:
    python -m scripts.validate_workflow definitions/sow_approval.json
"""
