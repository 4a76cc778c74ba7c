"""
Reusable content blocks for synthetic scenarios.

Each block has an original wording, a paraphrase that keeps the meaning with
different vocabulary, and the tags a careful extractor would assign.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ContentBlock:
    original: str
    paraphrase: str
    tags: tuple[str, ...]


CONTENT_BLOCKS = {
    # Productivity & habits
    "compound_learning": ContentBlock(
        original=(
            "The power of compound learning lies in consistent daily practice. Small "
            "improvements of just 1% per day compound to remarkable results over time. "
            "This is why daily habits matter more than occasional bursts of effort."
        ),
        paraphrase=(
            "Incremental daily progress creates exponential growth through compounding. "
            "When you improve slightly each day, these tiny gains stack up dramatically. "
            "Consistency beats intensity in the long run."
        ),
        tags=("learning", "habits", "productivity", "compound-growth"),
    ),
    "atomic_habits": ContentBlock(
        original=(
            "Atomic habits are tiny changes that compound over time. The key insight is "
            "that habits are the compound interest of self-improvement. Getting 1% better "
            "every day is more sustainable than trying to transform overnight."
        ),
        paraphrase=(
            "Small behavioral adjustments accumulate into major life changes. Your daily "
            "routines are like interest payments on your personal development - modest "
            "but consistent growth beats dramatic sporadic efforts."
        ),
        tags=("habits", "self-improvement", "productivity", "behavior-change"),
    ),
    # Writing
    "writing_flow": ContentBlock(
        original=(
            "Writing in flow state requires removing all distractions and surrendering to "
            "the process. The inner critic must be silenced during the first draft. "
            "Editing comes later - creation and critique are separate phases."
        ),
        paraphrase=(
            "Achieving creative flow while writing means eliminating interruptions and "
            "trusting the process. Your internal editor should be muted during initial "
            "drafting. The revision phase is distinct from the generative phase."
        ),
        tags=("writing", "creativity", "flow-state", "productivity"),
    ),
    # Knowledge management
    "zettelkasten": ContentBlock(
        original=(
            "A Zettelkasten works because each note contains exactly one idea. This "
            "atomicity enables flexible recombination. Notes link to each other, forming "
            "an emergent web of knowledge that grows smarter over time."
        ),
        paraphrase=(
            "The Zettelkasten method succeeds due to its single-idea-per-note rule. This "
            "granularity allows ideas to be remixed freely. The interconnected notes "
            "create an evolving network of understanding."
        ),
        tags=("zettelkasten", "note-taking", "knowledge-management", "pkm"),
    ),
    # Software development
    "refactoring": ContentBlock(
        original=(
            "Refactoring improves code structure without changing behavior. The key is to "
            "make small, incremental changes while keeping tests passing. Never refactor "
            "and add features in the same commit."
        ),
        paraphrase=(
            "Code restructuring maintains functionality while improving design. The "
            "approach involves gradual modifications validated by continuous testing. "
            "Feature additions and structural improvements should be separate changes."
        ),
        tags=("refactoring", "software-development", "clean-code", "programming"),
    ),
    # Health
    "exercise_clarity": ContentBlock(
        original=(
            "Regular exercise improves mental clarity and reduces stress. Even a 20-minute "
            "walk can boost cognitive function for hours afterward. Physical movement is "
            "essential for creative thinking."
        ),
        paraphrase=(
            "Physical activity enhances cognitive function and lowers anxiety. Brief "
            "periods of movement, like short walks, provide extended mental benefits. "
            "Bodily exercise supports imaginative thought processes."
        ),
        tags=("exercise", "mental-health", "productivity", "wellness"),
    ),
    "sleep_learning": ContentBlock(
        original=(
            "Sleep consolidates learning and memory. During deep sleep, the brain "
            "processes and integrates new information. Skipping sleep to study more is "
            "counterproductive - rest is when learning solidifies."
        ),
        paraphrase=(
            "Rest periods cement knowledge acquisition and recall. The brain organizes "
            "and incorporates fresh information during slumber. Sacrificing sleep for "
            "extra study time undermines the consolidation process."
        ),
        tags=("sleep", "learning", "memory", "health"),
    ),
    # Order-sensitive pair: the paraphrase shares everything after its opening clause
    "spaced_repetition": ContentBlock(
        original=(
            "Spaced repetition schedules each review just before the memory would fade. "
            "Every successful recall pushes the next review further into the future, so "
            "the total time spent reviewing shrinks while retention stays high. This makes "
            "it the most efficient way to keep facts available for years."
        ),
        paraphrase=(
            "Reviewing flashcards on an expanding schedule means each review lands just "
            "before the memory would fade. Every successful recall pushes the next review "
            "further into the future, so the total time spent reviewing shrinks while "
            "retention stays high. This makes it the most efficient way to keep facts "
            "available for years."
        ),
        tags=("learning", "memory", "spaced-repetition"),
    ),
}
