from techprobe.engine.merge import merge_findings
from techprobe.engine.models import DetectionFinding


def finding(name, confidence, *evidence):
    return DetectionFinding(
        name=name, category="Test", confidence=confidence,
        detection_method="Pattern Matching", evidence=evidence,
    )


def test_higher_confidence_wins_and_evidence_is_not_unioned():
    merged = merge_findings([finding("React", 0.4, "a")], [finding("React", 0.6, "b")])
    assert len(merged) == 1
    assert merged[0].confidence == 0.6
    assert merged[0].evidence == ("b",)


def test_tie_keeps_first_seen():
    merged = merge_findings([finding("React", 0.5, "first")], [finding("React", 0.5, "second")])
    assert merged[0].evidence == ("first",)


def test_sorted_descending_with_stable_ties():
    merged = merge_findings([
        finding("A", 0.3), finding("B", 0.9), finding("C", 0.3), finding("D", 0.5),
    ])
    assert [f.name for f in merged] == ["B", "D", "A", "C"]


def test_merge_evidence_switch_unions_evidence():
    merged = merge_findings(
        [finding("React", 0.4, "a", "shared")],
        [finding("React", 0.6, "b", "shared")],
        merge_evidence=True,
    )
    assert merged[0].confidence == 0.6
    assert merged[0].evidence == ("b", "shared", "a")


def test_names_unique_after_merge():
    merged = merge_findings(
        [finding("A", 0.3), finding("B", 0.4)],
        [finding("A", 0.5)],
        [finding("B", 0.2), finding("C", 0.8)],
    )
    names = [f.name for f in merged]
    assert sorted(names) == ["A", "B", "C"]
    assert names == ["C", "A", "B"]


def test_empty_input():
    assert merge_findings() == []
    assert merge_findings([], []) == []
