"""Link conversion helpers for the admin tooling.

These helpers turn shareable Drive links into direct image links without
probing anything. They reuse the classifier and extractor from
``drivelink.resolver`` so every caller applies the same matching rules.
"""

from typing import Dict, List, Optional, Union

from .resolver import build_candidate_chain, extract_file_id, is_drive_url

DIRECT_HOST_MARKERS = ("drive.usercontent.google.com", "lh3.googleusercontent.com")


def link_variants(file_id: str, thumbnail_width: int = 800) -> Dict[str, str]:
    """Named direct-access forms of a Drive file.

    Args:
        file_id: Drive file ID
        thumbnail_width: Width requested from the thumbnail endpoint

    Returns:
        Mapping of variant name to URL
    """
    return {
        "direct": f"https://drive.usercontent.google.com/download?id={file_id}&export=view&authuser=0",
        "lh3": f"https://lh3.googleusercontent.com/d/{file_id}",
        "thumbnail": f"https://drive.google.com/thumbnail?id={file_id}&sz=w{thumbnail_width}",
        "legacy": f"https://drive.google.com/uc?export=view&id={file_id}",
        "download": f"https://drive.google.com/uc?export=download&id={file_id}",
        "preview": f"https://drive.google.com/file/d/{file_id}/preview",
    }


def split_links(links: Union[str, List[str], None]) -> List[str]:
    """Split a pasted blob of links.

    Newline-separated input wins over comma-separated input. Blank entries
    are dropped.
    """
    if links is None:
        return []
    if isinstance(links, str):
        if "\n" in links:
            parts = links.splitlines()
        elif "," in links:
            parts = links.split(",")
        else:
            parts = [links]
    else:
        parts = list(links)

    return [part.strip() for part in parts if isinstance(part, str) and part.strip()]


def convert_link(url: str) -> Dict[str, Optional[str]]:
    """Convert one shareable link to a direct image link.

    Returns:
        ``{"original", "converted", "error"}``; exactly one of converted and
        error is set
    """
    result: Dict[str, Optional[str]] = {"original": url, "converted": None, "error": None}

    # drive.usercontent.google.com is not a classifier marker, so check direct hosts first
    if any(marker in url for marker in DIRECT_HOST_MARKERS):
        result["converted"] = url
        return result

    if not is_drive_url(url):
        result["error"] = "Not a Google Drive URL"
        return result

    file_id = extract_file_id(url)
    if not file_id:
        result["error"] = "Could not extract file ID from URL"
        return result

    result["converted"] = build_candidate_chain(file_id)[0]
    return result


def convert_links(links: Union[str, List[str], None]) -> List[Dict[str, Optional[str]]]:
    """Convert a batch of pasted links, one result per non-blank entry."""
    return [convert_link(url) for url in split_links(links)]
