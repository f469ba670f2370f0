from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from seedforge.chaos.engine import ChaosConfig

SPEC_SCHEMA_VERSION = 1
ENDING_FLAG = "ending"


@dataclass(frozen=True)
class ComponentDef:
    component_type: str
    config: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.component_type, "config": copy.deepcopy(self.config)}


@dataclass(frozen=True)
class EntityDef:
    entity_id: str
    entity_type: str
    x: float
    y: float
    width: float
    height: float
    color: str
    components: tuple[ComponentDef, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.entity_id, str) or not self.entity_id:
            raise ValueError("entity_id must be a non-empty string")
        if not isinstance(self.entity_type, str) or not self.entity_type:
            raise ValueError("entity_type must be a non-empty string")

    def component(self, component_type: str) -> ComponentDef | None:
        for component in self.components:
            if component.component_type == component_type:
                return component
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.entity_id,
            "type": self.entity_type,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "color": self.color,
            "components": [component.to_dict() for component in self.components],
        }


@dataclass(frozen=True)
class WorldConfig:
    gravity: str
    boundary: str
    special_physics: str
    width: int
    height: int
    background_color: str
    palette: dict[str, str] = field(default_factory=dict)
    custom_physics: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "gravity": self.gravity,
            "boundary": self.boundary,
            "special_physics": self.special_physics,
            "custom_physics": self.custom_physics,
            "width": self.width,
            "height": self.height,
            "background_color": self.background_color,
            "palette": dict(sorted(self.palette.items())),
        }


@dataclass(frozen=True)
class SystemDef:
    system_type: str
    config: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.system_type, "config": copy.deepcopy(self.config)}


@dataclass(frozen=True)
class RuleDef:
    trigger: str
    action: str
    effect: str
    condition: str | None = None

    def mentions(self, keyword: str) -> bool:
        keyword = keyword.lower()
        haystacks = [self.trigger, self.action, self.condition or ""]
        return any(keyword in text.lower() for text in haystacks)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "trigger": self.trigger,
            "action": self.action,
            "effect": self.effect,
        }
        if self.condition is not None:
            payload["condition"] = self.condition
        return payload


@dataclass(frozen=True)
class FeedbackLoop:
    loop_type: str
    description: str
    variables: tuple[str, ...]

    def __post_init__(self) -> None:
        if self.loop_type not in {"positive", "negative"}:
            raise ValueError("loop_type must be positive or negative")

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.loop_type,
            "description": self.description,
            "variables": list(self.variables),
        }


@dataclass(frozen=True)
class EventChoice:
    text: str
    effect: str

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "effect": self.effect}


@dataclass(frozen=True)
class NarrativeEvent:
    event_id: str
    trigger: str
    text: str
    choices: tuple[EventChoice, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"id": self.event_id, "trigger": self.trigger, "text": self.text}
        if self.choices:
            payload["choices"] = [choice.to_dict() for choice in self.choices]
        return payload


@dataclass(frozen=True)
class ClueDef:
    name: str
    description: str
    where: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "description": self.description, "where": self.where}

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ClueDef":
        return cls(
            name=str(payload["name"]),
            description=str(payload["description"]),
            where=str(payload["where"]),
        )


@dataclass(frozen=True)
class NarrativeChoice:
    text: str
    target_node_id: str
    condition: str | None = None
    effect: str | None = None
    hint: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"text": self.text, "target": self.target_node_id}
        if self.condition is not None:
            payload["condition"] = self.condition
        if self.effect is not None:
            payload["effect"] = self.effect
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "NarrativeChoice":
        return cls(
            text=str(payload["text"]),
            target_node_id=str(payload["target"]),
            condition=payload.get("condition"),
            effect=payload.get("effect"),
            hint=payload.get("hint"),
        )


@dataclass(frozen=True)
class NarrativeNode:
    node_id: str
    text: str
    mood: str | None = None
    choices: tuple[NarrativeChoice, ...] = ()
    clue: str | None = None
    clue_index: int | None = None
    flags: tuple[str, ...] = ()

    @property
    def is_ending(self) -> bool:
        return ENDING_FLAG in self.flags

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.node_id,
            "text": self.text,
            "choices": [choice.to_dict() for choice in self.choices],
        }
        if self.mood is not None:
            payload["mood"] = self.mood
        if self.clue is not None:
            payload["clue"] = self.clue
            payload["clue_index"] = self.clue_index
        if self.flags:
            payload["flags"] = list(self.flags)
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "NarrativeNode":
        return cls(
            node_id=str(payload["id"]),
            text=str(payload["text"]),
            mood=payload.get("mood"),
            choices=tuple(NarrativeChoice.from_dict(row) for row in payload.get("choices", [])),
            clue=payload.get("clue"),
            clue_index=payload.get("clue_index"),
            flags=tuple(payload.get("flags", [])),
        )


@dataclass(frozen=True)
class NarrativeGraph:
    nodes: tuple[NarrativeNode, ...]
    start_node_id: str
    clue_chain: tuple[ClueDef, ...] = ()
    template: str = ""

    def by_id(self) -> dict[str, NarrativeNode]:
        return {node.node_id: node for node in self.nodes}

    def ending_nodes(self) -> list[NarrativeNode]:
        return [node for node in self.nodes if node.is_ending]

    def referenced_clue_indices(self) -> set[int]:
        return {node.clue_index for node in self.nodes if node.clue_index is not None}

    def validate(self) -> None:
        """Raise ValueError when the graph breaks its structural contract."""
        nodes_by_id = self.by_id()
        if len(nodes_by_id) != len(self.nodes):
            raise ValueError("narrative graph node ids must be unique")
        if self.start_node_id not in nodes_by_id:
            raise ValueError(f"start node {self.start_node_id!r} is missing")
        endings = self.ending_nodes()
        if not endings:
            raise ValueError("narrative graph needs at least one ending node")
        for node in endings:
            if node.choices:
                raise ValueError(f"ending node {node.node_id!r} must not have choices")
        for node in self.nodes:
            for choice in node.choices:
                if choice.target_node_id not in nodes_by_id:
                    raise ValueError(
                        f"node {node.node_id!r} choice targets unknown node {choice.target_node_id!r}"
                    )
            if node.clue_index is not None and not 0 <= node.clue_index < len(self.clue_chain):
                raise ValueError(f"node {node.node_id!r} references invalid clue index {node.clue_index}")
        missing = set(range(len(self.clue_chain))) - self.referenced_clue_indices()
        if missing:
            raise ValueError(f"clue chain entries never revealed: {sorted(missing)}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "template": self.template,
            "start_node_id": self.start_node_id,
            "nodes": [node.to_dict() for node in self.nodes],
            "clue_chain": [clue.to_dict() for clue in self.clue_chain],
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "NarrativeGraph":
        return cls(
            nodes=tuple(NarrativeNode.from_dict(row) for row in payload["nodes"]),
            start_node_id=str(payload["start_node_id"]),
            clue_chain=tuple(ClueDef.from_dict(row) for row in payload.get("clue_chain", [])),
            template=str(payload.get("template", "")),
        )


@dataclass(frozen=True)
class NarrativeConfig:
    world_difference: str
    character_archetype: str
    events: tuple[NarrativeEvent, ...]
    graph: NarrativeGraph
    character: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "world_difference": self.world_difference,
            "character_archetype": self.character_archetype,
            "character": dict(self.character),
            "events": [event.to_dict() for event in self.events],
            "graph": self.graph.to_dict(),
        }


@dataclass(frozen=True)
class DifficultyConfig:
    style: str
    pace: str
    skill_luck_ratio: str
    curve: tuple[float, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "style": self.style,
            "pace": self.pace,
            "skill_luck_ratio": self.skill_luck_ratio,
            "curve": list(self.curve),
        }


@dataclass(frozen=True)
class GameSpecification:
    game_id: str
    seed_code: str
    name: str
    description: str
    genre: str
    visual_style: str
    verbs: tuple[str, ...]
    world: WorldConfig
    entities: tuple[EntityDef, ...]
    genre_data: dict[str, Any]
    systems: tuple[SystemDef, ...]
    rules: tuple[RuleDef, ...]
    feedback_loops: tuple[FeedbackLoop, ...]
    narrative: NarrativeConfig
    difficulty: DifficultyConfig
    chaos: ChaosConfig
    internal_seed: int

    def system_types(self) -> set[str]:
        return {system.system_type for system in self.systems}

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema_version": SPEC_SCHEMA_VERSION,
            "id": self.game_id,
            "seed_code": self.seed_code,
            "name": self.name,
            "description": self.description,
            "genre": self.genre,
            "visual_style": self.visual_style,
            "verbs": list(self.verbs),
            "world": self.world.to_dict(),
            "entities": [entity.to_dict() for entity in self.entities],
            "genre_data": copy.deepcopy(self.genre_data),
            "systems": [system.to_dict() for system in self.systems],
            "rules": [rule.to_dict() for rule in self.rules],
            "feedback_loops": [loop.to_dict() for loop in self.feedback_loops],
            "narrative": self.narrative.to_dict(),
            "difficulty": self.difficulty.to_dict(),
            "chaos": self.chaos.to_dict(),
            "internal_seed": self.internal_seed,
        }
