"""Path parameter dependencies shared by the routers"""

from .validators import validate_uuid


def valid_agent_id(agent_id: str) -> str:
    return validate_uuid(agent_id, "Agent")
