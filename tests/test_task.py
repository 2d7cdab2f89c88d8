import pytest

from nexusnode.task import Task, combine_proof_hashes

FIRST = bytes([1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12])
SECOND = bytes([13, 14, 15, 16, 17, 18, 19, 20, 21, 22, 23, 24])
THIRD = bytes([25, 26, 27, 28, 29, 30, 31, 32, 33, 34, 35, 36])


def make_task(program_id="test_program"):
    return Task.from_input("test_task", program_id, FIRST, "proof_required", "medium")


def test_combine_empty():
    assert combine_proof_hashes([]) == ""


def test_combine_single_hash():
    result = combine_proof_hashes(["a1b2c3d4e5f6"])
    assert len(result) == 64
    assert result == "966f43edb4fb988490ec112be0d646d119651650d74e4244ec3d291a1c073cf2"


def test_combine_multiple_hashes():
    hashes = ["a1b2c3d4e5f6", "7890abcdef12", "345678901234"]
    combined = combine_proof_hashes(hashes)
    assert len(combined) == 64
    assert combined == "98400b67ac1179a39e81a37ff904cf6baf9d442faeced4ffa13adf00bca2f5e0"
    assert combine_proof_hashes(hashes) == combined
    assert combine_proof_hashes(list(reversed(hashes))) != combined


def test_combine_is_concatenation():
    assert combine_proof_hashes(["a1b2c3", "d4e5f6"]) == combine_proof_hashes(["a1b2c3d4e5f6"])


def test_task_input_methods():
    task = make_task()
    inputs = task.all_inputs()
    assert len(inputs) == 1
    assert inputs[0] == FIRST
    assert task.public_inputs == FIRST


def test_multiple_inputs():
    task = make_task()
    task.public_inputs_list.append(SECOND)
    task.public_inputs_list.append(THIRD)
    inputs = task.all_inputs()
    assert inputs == [FIRST, SECOND, THIRD]
    assert inputs[0] == FIRST


def test_backward_compatibility():
    task = make_task("fib_input_initial")
    assert len(task.all_inputs()) == 1
    assert task.all_inputs()[0] == FIRST
    assert task.program_id == "fib_input_initial"


def test_display():
    task = make_task()
    task.public_inputs_list.append(SECOND)
    assert str(task) == "Task ID: test_task, Program ID: test_program, Inputs: 2"


@pytest.mark.parametrize("field_name,value", [("task_type", "proof_required"), ("difficulty", "medium")])
def test_from_input_keeps_metadata(field_name, value):
    assert getattr(make_task(), field_name) == value