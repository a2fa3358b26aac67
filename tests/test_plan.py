"""
Tests for the file plan: sizes, ordering, directory slots.
No disk access here, plan_files() only does arithmetic.
"""
from pathlib import Path

from fspopulate.config import PopulationConfig
from fspopulate.dataset import STANDARD_FILE_SIZE, FileTask, plan_files

GiB = 1024**3
TiB = 1024**4
MiB = 1024**2


def small_config(**kwargs) -> PopulationConfig:
    params = dict(path=Path("/nonexistent"), total_size=10_000, bulk_files=4, bulk_size=1000, subdirs=3)
    params.update(kwargs)
    return PopulationConfig(**params)


def test_bulk_then_standard_then_remainder():
    tasks = list(plan_files(small_config(total_size=4000 + STANDARD_FILE_SIZE + 123)))
    assert [t.expected_size for t in tasks] == [1000, 1000, 1000, 1000, STANDARD_FILE_SIZE, 123]
    assert [t.file_index for t in tasks] == list(range(6))


def test_last_file_clipped_inside_bulk_range():
    tasks = list(plan_files(small_config(total_size=2500)))
    assert [t.expected_size for t in tasks] == [1000, 1000, 500]


def test_round_robin_directories():
    tasks = list(plan_files(small_config(total_size=7000, bulk_size=1000, bulk_files=7)))
    assert [t.dir_index for t in tasks] == [0, 1, 2, 0, 1, 2, 0]


def test_every_directory_used_before_reuse():
    config = small_config(total_size=50 * 10, bulk_files=50, bulk_size=10, subdirs=16)
    tasks = list(plan_files(config))
    first_sweep = [t.dir_index for t in tasks[: config.subdirs]]
    assert sorted(first_sweep) == list(range(config.subdirs))


def test_directory_slots_follow_file_counter():
    config = small_config(total_size=5000, bulk_files=10, bulk_size=1000, subdirs=3)
    tasks = list(plan_files(config))
    assert [t.create_dir for t in tasks] == [True, True, True, False, False]
    assert {t.dir_index for t in tasks if t.create_dir} == {0, 1, 2}


def test_directory_slots_with_fewer_files_than_subdirs():
    tasks = list(plan_files(small_config(total_size=2000, subdirs=8)))
    assert [(t.dir_index, t.create_dir) for t in tasks] == [(0, True), (1, True)]


def test_zero_total_plans_nothing():
    assert list(plan_files(small_config(total_size=0))) == []


def test_zero_bulk_size_still_plans_bulk_slots():
    config = PopulationConfig.with_defaults("/nonexistent", 100)
    tasks = list(plan_files(config))
    assert config.bulk_size == 0
    assert len(tasks) == 769
    assert all(t.expected_size == 0 for t in tasks[:768])
    assert tasks[-1].expected_size == 100


def test_planned_sizes_add_up_to_total():
    for total in (0, 1, 999, 1000, 4001, 3 * STANDARD_FILE_SIZE + 7):
        tasks = plan_files(small_config(total_size=total))
        assert sum(t.expected_size for t in tasks) == total


def test_plan_is_deterministic():
    config = small_config(total_size=12345678)
    assert list(plan_files(config)) == list(plan_files(config))


def test_paths():
    task = FileTask(dir_index=3, file_index=1234, expected_size=1)
    assert task.file_path(Path("/root/tree")) == Path("/root/tree/dir000003/file001234")
    assert task.dir_path(Path("/root/tree")) == Path("/root/tree/dir000003")


def test_one_tib_default_policy():
    config = PopulationConfig.with_defaults("/nonexistent", TiB)
    assert config.bulk_files == 768
    assert config.bulk_size == GiB
    assert config.subdirs == 256

    count = 0
    total = 0
    last = None
    for task in plan_files(config):
        if task.file_index < 768:
            assert task.expected_size == GiB
        count += 1
        total += task.expected_size
        last = task

    standard = (TiB - 768 * GiB) // (10 * MiB)
    remainder = TiB - 768 * GiB - standard * 10 * MiB
    assert standard == 26214
    assert remainder == 4194304
    assert count == 768 + standard + 1 == 26983
    assert last.expected_size == remainder
    assert last.file_index == 26982
    assert last.dir_index == 26982 % 256
    assert total == TiB
