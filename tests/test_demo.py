import pytest

from neoheap.demo import CREATE_FAILED, main, run_demo


def test_run_demo_default_succeeds():
    assert run_demo(128) == 0


def test_run_demo_larger_heap_succeeds():
    assert run_demo(1024) == 0


def test_run_demo_too_small_fails_at_create():
    assert run_demo(64) == CREATE_FAILED


def test_main_without_arguments_succeeds():
    assert main([]) == 0


def test_main_with_size_argument():
    assert main(["128"]) == 0
    assert main(["32"]) == CREATE_FAILED


def test_main_rejects_negative_size():
    with pytest.raises(SystemExit):
        main(["-5"])