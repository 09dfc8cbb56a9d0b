from typing import Dict, Iterable, List

from techprobe.engine.models import DetectionFinding


def merge_findings(*finding_lists: Iterable[DetectionFinding], merge_evidence: bool = False) -> List[DetectionFinding]:
    """Collapse findings that share a name, then sort by confidence.

    For duplicate names the higher-confidence finding is kept and the other
    is discarded, evidence included. A tie keeps the first one seen. With
    ``merge_evidence=True`` the winner also absorbs the loser's evidence
    (order preserved, duplicates dropped).

    The sort is stable, so equal confidences keep first-seen order.
    """
    winners: Dict[str, DetectionFinding] = {}
    order: List[str] = []

    for findings in finding_lists:
        for finding in findings:
            current = winners.get(finding.name)
            if current is None:
                winners[finding.name] = finding
                order.append(finding.name)
                continue

            keep, drop = (finding, current) if finding.confidence > current.confidence else (current, finding)
            if merge_evidence:
                evidence = tuple(dict.fromkeys(keep.evidence + drop.evidence))
                keep = keep.model_copy(update={"evidence": evidence})
            winners[finding.name] = keep

    merged = [winners[name] for name in order]
    merged.sort(key=lambda f: f.confidence, reverse=True)
    return merged
