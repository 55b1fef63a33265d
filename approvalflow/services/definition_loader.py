"""Definition Loader - Read, write and register workflow definition documents"""
import json
from pathlib import Path
from typing import Any, Dict, List, Union

from pydantic import ValidationError as PydanticValidationError

from ..domain.models import WorkflowDefinition
from ..domain.errors import AlreadyExistsError, InvalidDefinitionError, WorkflowNotFoundError
from ..utils.logger import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]


def parse_definition(data: Dict[str, Any]) -> WorkflowDefinition:
    """
    Build a definition from a document
    
    Schema problems (missing fields, wrong types) and graph problems are both
    reported as InvalidDefinitionError.
    """
    try:
        return WorkflowDefinition.model_validate(data)
    except PydanticValidationError as e:
        raise InvalidDefinitionError(
            f"Workflow definition is invalid: {e.error_count()} error(s)",
            details={
                "workflow_id": data.get("id"),
                "errors": [
                    {
                        "type": err["type"].upper(),
                        "message": err["msg"],
                        "path": ".".join(str(p) for p in err["loc"])
                    }
                    for err in e.errors()
                ]
            }
        )


def load_definition(path: PathLike) -> WorkflowDefinition:
    """
    Load a definition from a JSON file; the file stem is the default id
    
    Malformed JSON and documents that are not a JSON object raise
    InvalidDefinitionError; an unreadable file raises OSError.
    """
    path = Path(path)
    with path.open(encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidDefinitionError(
                f"Workflow definition {path.name} is not valid JSON",
                details={"errors": [{"type": "MALFORMED_JSON", "message": e.msg, "path": f"line {e.lineno}, column {e.colno}"}]}
            )
    if not isinstance(data, dict):
        raise InvalidDefinitionError(
            f"Workflow definition {path.name} must be a JSON object",
            details={"errors": [{"type": "NOT_AN_OBJECT", "message": f"Found {type(data).__name__}", "path": ""}]}
        )
    data.setdefault("id", path.stem)
    definition = parse_definition(data)
    logger.info(
        f"Loaded workflow definition {definition.id} from {path}",
        extra={"workflow_id": definition.id}
    )
    return definition


def dump_definition(definition: WorkflowDefinition) -> Dict[str, Any]:
    """JSON-compatible document for a definition, action order preserved"""
    return definition.model_dump(mode="json")


def save_definition(definition: WorkflowDefinition, path: PathLike) -> Path:
    """Write a definition to a JSON file"""
    path = Path(path)
    with path.open("w", encoding="utf-8") as f:
        json.dump(dump_definition(definition), f, indent=2)
    return path


class DefinitionRegistry:
    """Workflow definitions by id, read-only once registered"""
    
    def __init__(self) -> None:
        self._definitions: Dict[str, WorkflowDefinition] = {}
    
    def register(self, definition: WorkflowDefinition) -> WorkflowDefinition:
        if not definition.id:
            raise InvalidDefinitionError(
                "Workflow definition needs an id to be registered",
                details={"errors": [{"type": "MISSING_ID", "message": "id is required", "path": "id"}]}
            )
        if definition.id in self._definitions:
            raise AlreadyExistsError(
                f"Workflow {definition.id} already registered",
                details={"workflow_id": definition.id}
            )
        self._definitions[definition.id] = definition
        logger.info(f"Registered workflow definition: {definition.id}", extra={"workflow_id": definition.id})
        return definition
    
    def get(self, workflow_id: str) -> WorkflowDefinition:
        definition = self._definitions.get(workflow_id)
        if definition is None:
            raise WorkflowNotFoundError(
                f"Workflow {workflow_id} not found",
                details={"workflow_id": workflow_id}
            )
        return definition
    
    def list_definitions(self) -> List[WorkflowDefinition]:
        return list(self._definitions.values())
    
    def __contains__(self, workflow_id: object) -> bool:
        return workflow_id in self._definitions
    
    def load_directory(self, directory: PathLike) -> List[WorkflowDefinition]:
        """Register every *.json definition of a directory, sorted by file name"""
        directory = Path(directory)
        if not directory.is_dir():
            logger.warning(f"Definitions directory not found: {directory}")
            return []
        return [self.register(load_definition(p)) for p in sorted(directory.glob("*.json"))]
