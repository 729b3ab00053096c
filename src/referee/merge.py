from dataclasses import replace


def merge_candidates(records):
    """
    Collapse raw matches into one record per (statement, url, property, external id).
    Output is sorted and text windows are deduplicated and sorted, so merging is idempotent.
    """
    merged = []
    for record in sorted(records, key=lambda r: r.sort_key()):
        if merged and merged[-1].merge_key() == record.merge_key():
            merged[-1].texts.extend(record.texts)
            continue
        merged.append(replace(record, texts=list(record.texts)))
    for record in merged:
        record.texts = sorted(set(record.texts))
    return merged
