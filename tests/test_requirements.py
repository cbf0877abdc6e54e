import dataclasses

import pytest
from requirements import DEFAULT_BRANCH, POLICIES, get_policy, list_branches


class TestGetPolicy:
    @pytest.mark.parametrize("branch", ["CSE", "CSSS", "CSAM", "ECE", "CSB", "CSD", "CSAI", "EVE"])
    def test_known_branches(self, branch):
        assert get_policy(branch).branch == branch

    def test_case_and_whitespace_insensitive(self):
        assert get_policy("  csam ").branch == "CSAM"

    def test_unknown_falls_back_to_cse(self, capsys):
        policy = get_policy("MECH")
        assert policy.branch == DEFAULT_BRANCH
        assert "[WARN]" in capsys.readouterr().err

    def test_none_falls_back_silently(self, capsys):
        assert get_policy(None).branch == "CSE"
        assert capsys.readouterr().err == ""

    def test_list_branches(self):
        assert set(list_branches()) == {"CSE", "CSSS", "CSAM", "ECE", "CSB", "CSD", "CSAI", "EVE"}


class TestPolicyValues:
    def test_cse(self):
        p = get_policy("CSE")
        assert p.total_credits == 156
        assert p.elective_buckets[0].bucket_id == "cse_electives"
        assert p.elective_buckets[0].required_credits == 32
        assert p.ssh_credits == 12
        assert p.max_online_credits == 8
        assert p.max_independent_credits == 8
        assert p.honors.total_credits == 168
        assert p.honors.min_cgpa == 8.0
        assert p.honors.requires_btp is True

    def test_csss(self):
        p = get_policy("CSSS")
        assert p.elective_buckets[0].required_credits == 16
        assert p.ssh_credits == 28

    def test_csam_split_bucket(self):
        bucket = get_policy("CSAM").elective_buckets[0]
        assert bucket.required_credits == 32
        subs = {s.sub_id: s for s in bucket.sub_disciplines}
        assert subs["cse"].min_credits == 12
        assert subs["math"].min_credits == 12
        assert "MTH" in bucket.prefixes and "CSE" in bucket.prefixes

    def test_ece_bucket(self):
        bucket = get_policy("ECE").elective_buckets[0]
        assert bucket.bucket_id == "ece_electives"
        assert bucket.prefixes == ("ECE",)

    def test_policies_are_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            POLICIES["CSE"].total_credits = 100
