from unittest.mock import patch

import main


def test_demo_commits_one_block(capsys):
    chain = main.demo()
    shard_id = chain.assign_shard("Alice")
    assert chain.height(shard_id) == 1
    assert chain.height(1 - shard_id) == 0
    tx = chain.tip(shard_id).transactions[0]
    assert tx.signing_message() == b"Alice:Bob:CustodyToken(10.0):1:1000"
    assert chain.used_nonces == {1}
    assert "Blockchain initialized" in capsys.readouterr().out


def test_main_demo_command():
    assert main.main(["demo"]) == 0


def test_main_unknown_command(capsys):
    assert main.main(["crawl"]) == 2
    assert "usage" in capsys.readouterr().err


def test_main_serves_without_arguments():
    with patch("main_fastapi.run") as run:
        assert main.main([]) == 0
    run.assert_called_once_with()
