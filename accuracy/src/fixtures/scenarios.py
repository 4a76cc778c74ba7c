"""
Synthetic evaluation scenarios.

Each scenario has controlled characteristics:
- Exact duplicates (same content in an existing note and a new document)
- Paraphrases (same meaning, different wording)
- Tag synonyms (new content using variants of existing tags)
- Cross-document restatements (order-sensitive consolidation)
- NVQ-rich writing for the quality path

Scenarios are rebuilt on every call, so runs never share mutable state.
"""

from typing import Optional

from shared.deduplication import Document, ExistingNote

from ..models import (
    ExpectedConnection,
    ExpectedConsolidation,
    ExpectedNote,
    TestScenario,
)
from .content import CONTENT_BLOCKS


def _document(doc_id: str, blocks: list[str], **metadata) -> Document:
    return Document(id=doc_id, content="\n\n".join(blocks), metadata=metadata)


# =============================================================================
# Scenario 1: Exact duplicates
# =============================================================================

def exact_duplicate_scenario() -> TestScenario:
    compound = CONTENT_BLOCKS["compound_learning"]

    return TestScenario(
        name="Exact Duplicate Detection",
        description="Detection and consolidation of exact duplicate content across documents",
        existing_notes=[
            ExistingNote(
                id="existing-001",
                title="The Power of Compound Learning",
                content=compound.original,
                tags=["learning", "habits", "compound-growth"],
            ),
        ],
        existing_tags=["learning", "habits", "compound-growth"],
        documents=[
            _document("doc-001", [
                compound.original,
                CONTENT_BLOCKS["writing_flow"].original,
            ], has_exact_duplicate_of="existing-001"),
            _document("doc-002", [
                CONTENT_BLOCKS["atomic_habits"].original,
                CONTENT_BLOCKS["exercise_clarity"].original,
            ]),
        ],
        expected_notes=[
            ExpectedNote(
                title_patterns=["writing", "flow", "creative"],
                required_phrases=["flow state", "distractions", "first draft", "editing"],
                expected_tags=["writing", "creativity", "flow-state"],
            ),
            ExpectedNote(
                title_patterns=["atomic", "habits", "tiny", "changes"],
                required_phrases=["atomic habits", "compound", "1%"],
                expected_tags=["habits", "self-improvement"],
                expected_connections=[
                    ExpectedConnection(
                        target_title_pattern="compound learning|power of compound",
                        types=["related", "extends", "supports"],
                    ),
                ],
            ),
            ExpectedNote(
                title_patterns=["exercise", "mental", "clarity", "physical"],
                required_phrases=["exercise", "mental clarity", "cognitive"],
                expected_tags=["exercise", "mental-health", "wellness"],
            ),
        ],
        expected_consolidations=[
            ExpectedConsolidation(
                new_content_pattern=r"compound learning.*daily practice|1% per day",
                existing_note_title="The Power of Compound Learning",
                merged_content_phrases=["compound", "daily", "improvements"],
            ),
        ],
    )


# =============================================================================
# Scenario 2: Paraphrases
# =============================================================================

def paraphrase_scenario() -> TestScenario:
    return TestScenario(
        name="Paraphrase Detection",
        description="Detection and consolidation of semantically equivalent paraphrased content",
        existing_notes=[
            ExistingNote(
                id="existing-001",
                title="Zettelkasten Single-Idea Notes",
                content=CONTENT_BLOCKS["zettelkasten"].original,
                tags=["zettelkasten", "note-taking", "knowledge-management"],
            ),
            ExistingNote(
                id="existing-002",
                title="Exercise Boosts Mental Clarity",
                content=CONTENT_BLOCKS["exercise_clarity"].original,
                tags=["exercise", "mental-health", "productivity"],
            ),
            ExistingNote(
                id="existing-003",
                title="Sleep and Memory Consolidation",
                content=CONTENT_BLOCKS["sleep_learning"].original,
                tags=["sleep", "learning", "memory"],
            ),
        ],
        existing_tags=[
            "zettelkasten", "note-taking", "knowledge-management",
            "exercise", "mental-health", "sleep", "learning", "memory",
        ],
        documents=[
            _document("doc-001", [
                CONTENT_BLOCKS["zettelkasten"].paraphrase,
                CONTENT_BLOCKS["refactoring"].original,
            ], paraphrased_from="existing-001"),
            _document("doc-002", [
                CONTENT_BLOCKS["exercise_clarity"].paraphrase,
                CONTENT_BLOCKS["sleep_learning"].paraphrase,
            ], paraphrased_from="existing-002"),
        ],
        expected_notes=[
            ExpectedNote(
                title_patterns=["refactoring", "code", "structure"],
                required_phrases=["refactoring", "behavior", "incremental", "tests"],
                expected_tags=["refactoring", "software-development", "clean-code"],
            ),
        ],
        expected_consolidations=[
            ExpectedConsolidation(
                new_content_pattern=r"single-idea-per-note|granularity|remixed",
                existing_note_title="Zettelkasten Single-Idea Notes",
                merged_content_phrases=["atomicity", "single", "idea", "note"],
            ),
            ExpectedConsolidation(
                new_content_pattern=r"physical activity|cognitive function|anxiety",
                existing_note_title="Exercise Boosts Mental Clarity",
                merged_content_phrases=["exercise", "mental", "clarity"],
            ),
            ExpectedConsolidation(
                new_content_pattern=r"rest periods|knowledge acquisition|slumber",
                existing_note_title="Sleep and Memory Consolidation",
                merged_content_phrases=["sleep", "memory", "consolidation"],
            ),
        ],
    )


# =============================================================================
# Scenario 3: Tag synonyms
# =============================================================================

def tag_synonym_scenario() -> TestScenario:
    return TestScenario(
        name="Tag Synonym Handling",
        description="Reuse of existing tags when content uses synonymous terminology",
        existing_notes=[
            ExistingNote(
                id="existing-001",
                title="Machine Learning Fundamentals",
                content=(
                    "Machine learning is a subset of artificial intelligence that enables "
                    "systems to learn from data."
                ),
                tags=["machine-learning", "artificial-intelligence"],
            ),
        ],
        existing_tags=[
            "machine-learning",
            "artificial-intelligence",
            "productivity",
            "note-taking",
            "software-development",
            "health",
            "fitness",
        ],
        documents=[
            _document("doc-001", [
                "Deep learning and neural networks are revolutionizing AI/ML applications. "
                "The intersection of ML and data science creates powerful predictive models. "
                "Modern machine learning techniques enable unprecedented pattern recognition.",
            ]),
            _document("doc-002", [
                "Personal knowledge management (PKM) systems help with being productive and "
                "managing your notes effectively. Good note management leads to better work "
                "output and efficiency.",
            ]),
            _document("doc-003", [
                "Physical wellness and exercise are crucial for maintaining good health. "
                "Regular workouts and staying fit improves both physical and mental wellbeing.",
            ]),
        ],
        expected_notes=[
            ExpectedNote(
                title_patterns=["deep learning", "neural", "AI", "ML"],
                required_phrases=["deep learning", "neural networks", "pattern recognition"],
                expected_tags=["machine-learning", "artificial-intelligence"],
                expected_connections=[
                    ExpectedConnection(
                        target_title_pattern="Machine Learning Fundamentals",
                        types=["related", "extends"],
                    ),
                ],
            ),
            ExpectedNote(
                title_patterns=["knowledge management", "PKM", "productivity"],
                required_phrases=["knowledge management", "notes", "productive"],
                expected_tags=["productivity", "note-taking"],
            ),
            ExpectedNote(
                title_patterns=["wellness", "exercise", "health", "fitness"],
                required_phrases=["wellness", "exercise", "health"],
                expected_tags=["health", "fitness"],
            ),
        ],
    )


# =============================================================================
# Scenario 4: Cross-document consolidation (order-sensitive)
# =============================================================================

def cross_document_scenario() -> TestScenario:
    """
    Two documents restate one idea. Forward order, the second document's
    restatement merges into the note the first document created. Reversed,
    the roles swap and the consolidation targets the other note.
    """
    spaced = CONTENT_BLOCKS["spaced_repetition"]

    return TestScenario(
        name="Cross-Document Consolidation",
        description="A later document restates a note extracted from an earlier one",
        existing_notes=[],
        existing_tags=["learning", "memory"],
        documents=[
            _document("doc-a", [spaced.original, CONTENT_BLOCKS["writing_flow"].original]),
            _document("doc-b", [spaced.paraphrase, CONTENT_BLOCKS["refactoring"].original]),
        ],
        expected_notes=[
            ExpectedNote(
                title_patterns=["refactoring", "code", "structure"],
                required_phrases=["refactoring", "behavior", "incremental", "tests"],
                expected_tags=["refactoring", "software-development"],
            ),
        ],
        expected_consolidations=[
            ExpectedConsolidation(
                new_content_pattern=r"memory would fade",
                existing_note_title="Spaced repetition schedules",
                merged_content_phrases=["spaced repetition", "recall", "retention"],
                document_id="doc-b",
            ),
        ],
    )


# =============================================================================
# Scenario 5: Note quality samples
# =============================================================================

QUALITY_STRONG_NOTE = """I am keeping this because batching email into two daily windows will help me protect deep work mornings.
I realized that checking mail every hour was costing me the first focused hour of each day.
Status: Sapling
Type: Reflection
Stakeholder: Self
Project: Thesis
See [[Deep Work MOC]] and [[Attention Residue]]."""

QUALITY_PURPOSE_NOTE = """Purpose: This helps me remember why code review turnaround matters for the team.
Reviews that wait more than a day force authors to reload context, which enables bugs to slip through in rushed follow-ups.
Status: Seed
Type: Technical"""

QUALITY_RAW_NOTE = (
    "The Pomodoro technique splits work into twenty-five minute intervals separated by "
    "five minute breaks. It was developed by Francesco Cirillo in the late 1980s."
)


def quality_samples_scenario() -> TestScenario:
    return TestScenario(
        name="Note Quality Samples",
        description="Writing with varied purpose, metadata and links for NVQ scoring",
        existing_notes=[
            ExistingNote(
                id="existing-001",
                title="Deep Work MOC",
                content="Map of content for deep work, focus and attention management.",
                tags=["project/focus"],
            ),
        ],
        existing_tags=["project/focus", "productivity"],
        documents=[
            _document("doc-q1", [QUALITY_STRONG_NOTE]),
            _document("doc-q2", [QUALITY_PURPOSE_NOTE, QUALITY_RAW_NOTE]),
        ],
    )


# =============================================================================
# Lookup
# =============================================================================

def get_all_scenarios() -> list[TestScenario]:
    """All built-in scenarios, in a stable order."""
    return [
        exact_duplicate_scenario(),
        paraphrase_scenario(),
        tag_synonym_scenario(),
        cross_document_scenario(),
        quality_samples_scenario(),
    ]


def get_scenario(name: str) -> Optional[TestScenario]:
    """Find a scenario by name, case-insensitively."""
    wanted = name.strip().lower()
    for scenario in get_all_scenarios():
        if scenario.name.lower() == wanted:
            return scenario
    return None


def list_scenarios() -> list[str]:
    return [scenario.name for scenario in get_all_scenarios()]
