"""Branching mystery scripts for the narrative genre.

The template comes from the world difference, never from the stream:
colors_alive -> detective, sound_solid -> escape_room, time_uneven ->
time_paradox, memory_touch -> identity, and custom text by its djb2 hash.

Draw order:

- detective: victim, setting, trick, motive, suspect shuffle (5 draws),
  culprit
- other templates: scenario variant
- then one draw per kept scene for the first choice's trust effect
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from seedforge.gen.choices import ChoiceVector
from seedforge.gen.genres.base import Draw, GenreContent, GenreGenerator
from seedforge.gen.rng import draw_index, pick, shuffle_in_place
from seedforge.gen.seed import hash_string
from seedforge.gen.spec import (
    ENDING_FLAG,
    ClueDef,
    NarrativeChoice,
    NarrativeGraph,
    NarrativeNode,
    WorldConfig,
)

TEMPLATES = ("detective", "escape_room", "time_paradox", "identity")
WORLD_TEMPLATE_KEYS = {
    "colors_alive": "detective",
    "sound_solid": "escape_room",
    "time_uneven": "time_paradox",
    "memory_touch": "identity",
}

PACE_KEEP_RATIO = {"fast": 0.5, "medium": 0.75, "slow": 1.0}
TRUST_EFFECT = "change_trust:+10"
TRUST_THRESHOLD = 0.7
START_NODE_ID = "start"
ENDING_NODE_ID = "ending"

ARCHETYPE_BONUS = {
    "explorer": ("Search the places nobody else thought to look", "reveal_clue"),
    "guardian": ("Promise the frightened witnesses your protection", "change_trust:+20"),
    "fugitive": ("Slip past the cordon and follow your instinct", "skip_scene"),
    "collector": ("Catalogue every object before anyone moves it", "gain_item:evidence_kit"),
}


@dataclass(frozen=True)
class Scene:
    location: str
    text: str
    mood: str
    choices: tuple[tuple[str, str], ...]
    clue_index: int | None = None

    @property
    def essential(self) -> bool:
        return self.clue_index is not None


@dataclass
class CaseBlueprint:
    template: str
    setting: str
    scenes: list[Scene]
    clue_chain: list[ClueDef]
    revelation: str
    details: dict[str, Any] = field(default_factory=dict)


def template_for_world(world_difference: str) -> str:
    if world_difference in WORLD_TEMPLATE_KEYS:
        return WORLD_TEMPLATE_KEYS[world_difference]
    return TEMPLATES[hash_string(world_difference) % len(TEMPLATES)]


VICTIMS = (
    ("Professor Chen", "a university professor", "was found dead in the study, the door and windows locked from inside"),
    ("Director Wang", "a company owner", "collapsed in front of the office safe with no trace of anyone else"),
    ("Reporter Li", "an investigative journalist", "vanished the night before publishing a major story"),
    ("Doctor Zhao", "a surgeon", "was found poisoned inside the private clinic"),
    ("Painter Sun", "a celebrated painter", "died of a stab wound in the studio, yet the weapon is gone"),
)
SETTINGS = (
    ("the old mansion", "A three-storey mansion from another century, its corridors dim and its floorboards creaking"),
    ("the modern apartment", "A high-rise apartment downtown with electronic locks and cameras on every floor"),
    ("the country villa", "A lone villa far from the city, cut off from the world by a storm"),
    ("the riverside inn", "A hundred-year-old inn at the end of a flagstone lane"),
)
TRICKS = (
    (
        "locked room",
        "An ice wedge held the latch; when it melted the door locked itself.",
        "A thin trace of water under the door",
        "The radiator was turned up far beyond normal",
    ),
    (
        "vanishing weapon",
        "The blade was carved from ice and melted away after the attack.",
        "Frost damage around the edges of the wound",
        "Oddly shaped ice trays in the kitchen freezer",
    ),
    (
        "timing trick",
        "A recording of the victim's voice played on a timer to fake a living victim.",
        "The conversation the neighbours heard repeats at a fixed interval",
        "A hidden recorder tucked behind the bookshelf",
    ),
    (
        "double identity",
        "The culprit played two people with makeup and a change of clothes.",
        "The two visitors were never seen together",
        "Makeup remover and hair gel in the bin",
    ),
    (
        "first on the scene",
        "The person who broke the door down committed the crime in that very moment.",
        "A faint bloodstain on the sleeve of the first person through the door",
        "A tiny razor that fits in a closed palm",
    ),
    (
        "slow mechanism",
        "Dripping water rotted a wooden support until a weight fell.",
        "Water-soaked beams above the ceiling",
        "A bucket and a corroded rope in the attic",
    ),
)
MOTIVES = (
    ("passion", "The victim betrayed the culprit's trust years ago, and revenge has been planned ever since."),
    ("profit", "The victim controlled a fortune, and the culprit was the last obstacle to inheriting it."),
    ("profit", "The victim found proof of the culprit's embezzlement and had to be silenced."),
    ("passion", "Years of humiliation under the victim turned into a need for payback."),
    ("obsession", "The culprit treats crime as a puzzle and enjoyed designing a perfect one."),
    ("conviction", "The culprit believed the victim was hurting innocent people and called it justice."),
)
SUSPECTS = (
    ("Secretary Zhang", "the victim's private secretary", "claims to have been working late", "argued loudly with the victim that afternoon"),
    ("Butler Liu", "the butler of twenty years", "claims to have been cooking dinner", "knows every hidden passage in the house"),
    ("Lawyer Zhou", "the victim's lawyer", "claims to have been at the law office", "has been rewriting the victim's will"),
    ("Professor Wu", "a colleague of the victim", "claims to have been at a conference", "has an unresolved academic feud with the victim"),
    ("Doctor Lin", "the family doctor", "claims to have been on call", "knows the victim's health better than anyone"),
    ("Niece He", "a distant niece", "claims to have just arrived in town", "is a main beneficiary of the estate"),
)


def _detective_case(draw: Draw) -> CaseBlueprint:
    victim_name, victim_role, victim_detail = pick(draw, VICTIMS)
    setting_place, setting_detail = pick(draw, SETTINGS)
    trick_category, trick, key_clue, weapon_clue = pick(draw, TRICKS)
    motive_type, motive_detail = pick(draw, MOTIVES)
    pool = list(SUSPECTS)
    shuffle_in_place(draw, pool)
    suspects = pool[:3]
    culprit_index = draw_index(draw, 3)
    culprit = suspects[culprit_index][0]
    other = suspects[(culprit_index + 1) % 3][0]

    clue_chain = [
        ClueDef("Something wrong at the scene", key_clue, "the crime scene"),
        ClueDef("The victim's diary", f"{victim_name} met {culprit} in secret the day before", "the victim's desk"),
        ClueDef("Physical evidence", weapon_clue, "a hidden corner"),
        ClueDef("A broken alibi", f"{culprit}'s timeline does not match the camera footage", "the neighbourhood"),
        ClueDef("The hidden motive", motive_detail, "background checks"),
        ClueDef("The decisive proof", f"Traces of the method were found among {culprit}'s belongings", "the search"),
    ]
    roster = ", ".join(name for name, *_ in suspects)
    interviews = " ".join(f"{name} ({role}) {alibi}, but {suspicious}." for name, role, alibi, suspicious in suspects)
    scenes = [
        Scene(
            setting_place,
            f"{setting_detail}. You arrive after the call. {victim_name}, {victim_role}, {victim_detail}. "
            f"Waiting for you are {roster}.",
            "dark",
            (("Examine the scene first", "see the evidence first-hand"), (f"Question {suspects[0][0]}, who found the body", "learn how it was discovered")),
        ),
        Scene(
            "the crime scene",
            f"Something about the room feels arranged. {key_clue}. The detail sets you on edge.",
            "mystery",
            (("Photograph the anomaly", "keep the first real lead"), ("Check how the door and windows were locked", "work out how the culprit moved")),
            clue_index=0,
        ),
        Scene(
            "the victim's desk",
            f"An open diary lies on the desk. The day before, {victim_name} met {culprit} in secret. A few letters remain unopened.",
            "neutral",
            (("Read the most recent entries", "follow the victim's last days"), ("Open the letters", "they may hold something important")),
            clue_index=1,
        ),
        Scene(
            "the interviews",
            f"You question each suspect in turn. {interviews} Everyone looks guilty, and everyone has an alibi.",
            "tense",
            (
                (f"Dig into {culprit}'s alibi", "check the most suspicious story"),
                ("Pull the camera footage", "test the statements against facts"),
                (f"Ask {other} about the others", "learn who trusts whom"),
            ),
        ),
        Scene(
            "a hidden corner",
            f"In an overlooked corner of {setting_place} you find it. {weapon_clue}. This was a {trick_category}.",
            "mystery",
            (("Bag the evidence", "preserve it"), ("Search the area for more traces", "there may be more")),
            clue_index=2,
        ),
        Scene(
            "the corridor at night",
            f"The house is quiet. Footsteps pass your door and stop. By the time you look, the corridor of {setting_place} is empty.",
            "eerie",
            (("Follow the footsteps", "someone is nervous"), ("Lock your door and review your notes", "patience")),
        ),
        Scene(
            "the alibi check",
            f"You verify {culprit}'s story. There is a gap in the footage, and {culprit} had time to act and return.",
            "tense",
            (("Narrow down the missing minutes", "shrink the window"), ("Ask the others about the gap", "look for corroboration")),
            clue_index=3,
        ),
        Scene(
            "background checks",
            f"Piece by piece the motive appears. {motive_detail} Suddenly everything makes sense.",
            "warm",
            (("Collect written proof of the motive", "ground the deduction"), ("Find a witness who links motive and method", "close the chain")),
            clue_index=4,
        ),
        Scene(
            "the search",
            f"With a warrant you search {culprit}'s room and find what you needed. Every clue now forms one chain.",
            "mystery",
            (("Lay out the evidence and reveal the truth", "it is time"),),
            clue_index=5,
        ),
        Scene(
            "the confrontation",
            f"Everyone gathers. You walk through the case step by step until only one name remains: {culprit}.",
            "bright",
            (("Name the culprit", "the final deduction"),),
        ),
    ]
    return CaseBlueprint(
        template="detective",
        setting=setting_place,
        scenes=scenes,
        clue_chain=clue_chain,
        revelation=(
            f"{culprit} is silent for a long time, then lowers their head. \"You are right. It was me.\" "
            f"{motive_detail} And the method, {trick} was the heart of the plan. The case is closed."
        ),
        details={
            "victim": victim_name,
            "setting": setting_place,
            "trick_category": trick_category,
            "trick": trick,
            "motive_type": motive_type,
            "suspects": [
                {"name": name, "role": role, "alibi": alibi, "suspicious": suspicious}
                for name, role, alibi, suspicious in suspects
            ],
            "culprit_index": culprit_index,
        },
    )


ESCAPE_ROOMS = (
    (
        "the alchemist's laboratory",
        "You wake in an ancient laboratory. Bottles crowd the tables and alchemical symbols cover the walls. The door has three locks.",
        (
            ("the potion shelf", "Coloured liquids line the shelf. Three of them match symbols on the wall.", "The colour order gives the first code"),
            ("the balance", "An old balance holds a metal ball on one side. Weights lie scattered nearby.", "Balancing the scale releases a brass key"),
            ("the element dial", "A dial in the floor shows fire, water, earth and air. Each symbol turns on its own.", "The right element order springs a catch"),
            ("the mirror room", "A huge mirror covers one wall, and its reflection differs from the room in small ways.", "The differences point to a hidden drawer"),
            ("the final door", "You hold every answer. One by one you work the three locks.", "The three locks open in turn"),
        ),
        "The last mechanism yields and the door swings open. Light floods the laboratory. You are free.",
    ),
    (
        "the clockmaker's attic",
        "You are trapped in an attic full of clocks, each showing a different time. A note reads: when every clock agrees, the way out appears.",
        (
            ("the pocket watch bench", "A pocket watch lies in pieces beside a notebook with its last page torn out.", "The reassembled watch points to one hour"),
            ("the cuckoo clock", "The cuckoo is missing, and a tiny drawer hides under the clock.", "A slip of paper waits inside the cuckoo"),
            ("the sundial", "A small sundial sits on the sill beside an adjustable mirror.", "Angling the mirror shows the true time"),
            ("the music box", "The music box opens only at a certain hour. A riddle is carved into its lid.", "The riddle's answer is the hour"),
            ("the time lock", "Every clue points to the same moment. You step up to the lock.", "The right time opens the door"),
        ),
        "The clocks strike together and the lock clicks open. Behind you the attic falls silent.",
    ),
)


def _escape_room_case(draw: Draw) -> CaseBlueprint:
    theme, intro, puzzles, revelation = pick(draw, ESCAPE_ROOMS)
    clue_chain = [ClueDef(f"Answer to puzzle {index + 1}", key, room) for index, (room, _, key) in enumerate(puzzles)]
    moods = ("mystery", "neutral", "warm", "mystery", "bright")
    scenes = [
        Scene(theme, intro, "dark", (("Look around the room", "take stock"), ("Try the door anyway", "it never hurts"))),
    ]
    for index, (room, text, _key) in enumerate(puzzles):
        scenes.append(
            Scene(
                room,
                text,
                moods[index],
                ((f"Work on {room}", "this is the next lock"), ("Step back and compare notes", "a fresh angle")),
                clue_index=index,
            )
        )
        if index == 1:
            scenes.append(
                Scene(
                    "a quiet moment",
                    f"You sit on the floor of {theme} and listen. Somewhere behind the wall, a mechanism ticks.",
                    "neutral",
                    (("Press your ear to the wall", "listen"), ("Rest for a moment", "clear your head")),
                )
            )
        if index == 3:
            scenes.append(
                Scene(
                    "the draught",
                    "A cold draught moves through the room from a gap you cannot see.",
                    "eerie",
                    (("Trace the draught", "it comes from somewhere"), ("Ignore it and focus", "stay on task")),
                )
            )
    return CaseBlueprint(
        template="escape_room",
        setting=theme,
        scenes=scenes,
        clue_chain=clue_chain,
        revelation=revelation,
        details={"setting": theme},
    )


TIME_PARADOXES = (
    (
        "causal loop",
        "Your pocket watch shudders and the street around you changes. The date on the sign is three days ago, the day of the accident.",
        (
            ("the street before the accident", "Nobody notices you do not belong here. In two hours the crossing ahead will see an accident.", "You arrived before the accident"),
            ("the first intervention", "You change one man's route, yet the accident still happens to someone else.", "Preventing it only moves it"),
            ("the time rift", "A crack in the watch shows overlapping timelines. In every one, the accident happens.", "Every timeline holds the accident"),
            ("the hat", "In each timeline a figure in a hat waits near the crossing.", "A figure in a hat appears every time"),
            ("the standoff", "You corner the figure in a frozen moment. \"I made this loop,\" he says. \"In the first timeline, the victim was you.\"", "The figure built the loop to save you"),
        ),
        "The figure is your future self. You break the loop by accepting it and finding a way to live without turning back the clock. The watch ticks normally again.",
    ),
    (
        "memory loop",
        "You wake in a blank room. On the wall: you have been here 137 times. In the corner lies a notebook in your own handwriting.",
        (
            ("loop 137", "The notebook summarises 136 failed attempts and what each one taught you.", "Every loop wipes your memory"),
            ("the pattern", "In each loop one object changed: a chair, a crack in the ceiling, the colour of the light.", "The changes follow a pattern"),
            ("the loose tile", "The pattern points to the floor. One tile lifts to reveal a small space.", "The floor hides a compartment"),
            ("the anchor", "Inside sits a device labelled time anchor, fully charged at last.", "The anchor can fix the timeline"),
            ("the awakening", "You start the anchor. The number on the wall flickers and fades as real memories return.", "Your true memories come back"),
        ),
        "The anchor holds the timeline. The walls turn clear and the door opens onto a world a little better than the one you remember.",
    ),
)

IDENTITIES = (
    (
        "split self",
        "You wake in a hospital corridor in a patient's gown. The nurse calls you Mr Lin, a name that means nothing. Your left hand is covered in your own handwriting.",
        (
            ("the hospital", "Nobody ever visited you, the records say. Your hand reads: do not trust anyone here.", "Nobody has visited you"),
            ("the address", "The key opens a tidy apartment with photos of a confident version of you.", "The apartment belongs to you"),
            ("the diary", "The diary's last pages describe another self who acts at night.", "Someone else shares your body"),
            ("the clinic", "The doctor is startled. \"You were here last week, and you were different.\"", "The doctor has met the other you"),
            ("the inner room", "The other self is one you created to survive an old wound.", "The other self protects you"),
        ),
        "You choose to talk with the other self instead of erasing it. \"We are both me,\" you tell the mirror, and the reflection nods.",
    ),
    (
        "stolen identity",
        "You wake in a strange city with every memory intact, yet a stranger lives in your home and holds your papers.",
        (
            ("the police station", "The records show someone else's face under your name. A young officer slips you a card.", "The records were altered"),
            ("the officer's lead", "A similar case three months ago left notes in a locker.", "There was an earlier victim"),
            ("the locker", "The notes describe a ring that trades identities after drugging the owner.", "A ring trades identities"),
            ("the back-room clinic", "Files everywhere, and your name beside the words replacement complete.", "Your replacement was planned"),
            ("the meeting", "The impostor looks tired and afraid. \"They forced me too.\"", "The impostor is a victim as well"),
        ),
        "Together with your replacement you expose the ring. With your name back, you know exactly who you are.",
    ),
)


def _node_case(draw: Draw, template: str, variants: tuple, opening: str, clue_prefix: str) -> CaseBlueprint:
    core, intro, nodes, revelation = pick(draw, variants)
    clue_chain = [
        ClueDef(f"{clue_prefix} {index + 1}", finding, location)
        for index, (location, _text, finding) in enumerate(nodes)
    ]
    moods = ("neutral", "tense", "eerie", "mystery", "bright")
    scenes = [Scene(opening, intro, "eerie", (("Get your bearings", "where are you"), ("Check your pockets", "anything useful")))]
    for index, (location, text, _finding) in enumerate(nodes):
        scenes.append(
            Scene(
                location,
                text,
                moods[index],
                ((f"Press on at {location}", "follow the thread"), ("Stop and think it through", "look for the pattern")),
                clue_index=index,
            )
        )
        if index in (1, 3):
            scenes.append(
                Scene(
                    f"a pause after {location}",
                    "For a moment nothing happens. You catch your breath and let the pieces settle.",
                    "neutral",
                    (("Move on", "keep going"), ("Write down what you know", "memory is fragile here")),
                )
            )
    return CaseBlueprint(
        template=template,
        setting=core,
        scenes=scenes,
        clue_chain=clue_chain,
        revelation=revelation,
        details={"setting": core},
    )


def build_blueprint(draw: Draw, template: str) -> CaseBlueprint:
    if template == "detective":
        return _detective_case(draw)
    if template == "escape_room":
        return _escape_room_case(draw)
    if template == "time_paradox":
        return _node_case(draw, template, TIME_PARADOXES, "the first tremor", "Time clue")
    return _node_case(draw, template, IDENTITIES, "the awakening room", "Identity clue")


def select_scenes(scenes: list[Scene], pace: str) -> list[Scene]:
    """Keep the opening and every clue scene, plus the first share of the rest."""
    optional = [index for index, scene in enumerate(scenes[1:], start=1) if not scene.essential]
    keep_count = int(len(optional) * PACE_KEEP_RATIO[pace])
    kept_optional = set(optional[:keep_count])
    return [
        scene
        for index, scene in enumerate(scenes)
        if index == 0 or scene.essential or index in kept_optional
    ]


def _hint_visible(difficulty: str, scene: Scene, position: int) -> bool:
    if difficulty == "relaxed":
        return True
    if difficulty == "steady":
        return scene.essential
    if difficulty == "rollercoaster":
        return position % 2 == 0
    return False


def build_graph(draw: Draw, blueprint: CaseBlueprint, choices: ChoiceVector) -> NarrativeGraph:
    scenes = select_scenes(blueprint.scenes, choices.game_pace)
    ids = [START_NODE_ID if index == 0 else f"scene_{index}" for index in range(len(scenes))]
    nodes: list[NarrativeNode] = []
    for position, scene in enumerate(scenes):
        next_id = ids[position + 1] if position + 1 < len(scenes) else ENDING_NODE_ID
        skip_id = ids[position + 2] if position + 2 < len(scenes) else next_id
        show_hints = _hint_visible(choices.difficulty_style, scene, position)
        trust_effect = TRUST_EFFECT if draw() > TRUST_THRESHOLD else None
        node_choices = [
            NarrativeChoice(
                text=text,
                target_node_id=next_id if choice_index == 0 else skip_id,
                effect=trust_effect if choice_index == 0 else None,
                hint=hint if show_hints else None,
            )
            for choice_index, (text, hint) in enumerate(scene.choices)
        ]
        if position == 0:
            bonus_text, bonus_effect = ARCHETYPE_BONUS[choices.character_archetype]
            node_choices.append(
                NarrativeChoice(
                    text=bonus_text,
                    target_node_id=skip_id,
                    condition=f"archetype:{choices.character_archetype}",
                    effect=bonus_effect,
                )
            )
        clue = None
        if scene.clue_index is not None:
            clue_def = blueprint.clue_chain[scene.clue_index]
            clue = f"{clue_def.name}: {clue_def.description}"
        nodes.append(
            NarrativeNode(
                node_id=ids[position],
                text=scene.text,
                mood=scene.mood,
                choices=tuple(node_choices),
                clue=clue,
                clue_index=scene.clue_index,
            )
        )
    nodes.append(
        NarrativeNode(
            node_id=ENDING_NODE_ID,
            text=blueprint.revelation,
            mood="ending",
            flags=(ENDING_FLAG,),
        )
    )
    graph = NarrativeGraph(
        nodes=tuple(nodes),
        start_node_id=START_NODE_ID,
        clue_chain=tuple(blueprint.clue_chain),
        template=blueprint.template,
    )
    graph.validate()
    return graph


class NarrativeGenerator(GenreGenerator):
    genre = "narrative"
    data_key = "narrative"

    def generate(self, draw: Draw, choices: ChoiceVector, world: WorldConfig) -> GenreContent:
        template = template_for_world(choices.world_difference)
        blueprint = build_blueprint(draw, template)
        graph = build_graph(draw, blueprint, choices)
        payload = graph.to_dict()
        payload["case"] = blueprint.details
        return GenreContent(data={self.data_key: payload})
