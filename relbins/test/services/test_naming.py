from __future__ import annotations

import pytest

from relbins.services.naming import archive_name


def test_archive_name_format() -> None:
    assert (
        archive_name("spotter", "x86_64-unknown-linux-musl")
        == "spotter-x86_64-unknown-linux-musl.tar.gz"
    )


def test_archive_name_is_deterministic() -> None:
    first = archive_name("spotter", "aarch64-unknown-linux-gnu")
    second = archive_name("spotter", "aarch64-unknown-linux-gnu")
    assert first == second


def test_distinct_targets_do_not_collide() -> None:
    targets = [
        "x86_64-unknown-linux-musl",
        "x86_64-unknown-linux-gnu",
        "aarch64-unknown-linux-musl",
        "x86_64-pc-windows-gnu",
    ]
    names = {archive_name("spotter", t) for t in targets}
    assert len(names) == len(targets)


@pytest.mark.parametrize(
    ("bin_name", "target"),
    [("", "x86_64-unknown-linux-musl"), ("spotter", ""), ("../spotter", "t"), ("s", "a\\b")],
)
def test_rejects_empty_and_path_like_parts(bin_name: str, target: str) -> None:
    with pytest.raises(ValueError):
        archive_name(bin_name, target)
