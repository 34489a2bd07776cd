"""
Skill match scoring tests.

Covers:
- Weighted required/preferred score and its rounding
- Case- and whitespace-insensitive comparison
- Quality buckets, messages and reviewer insights
- Coverage score used by succession planning
"""

import pytest

from domain.matching import (
    BASE_SCORE,
    MatchQuality,
    compute_skill_match,
    coverage_score,
    match_message,
    match_quality,
    normalize_skill,
    reviewer_insight,
)


class TestComputeSkillMatch:
    """Tests for compute_skill_match."""

    def test_no_required_skills_gives_base_score(self):
        match = compute_skill_match(['Python'], [], ['Figma'])
        assert match.score == BASE_SCORE == 50
        assert match.matched_preferred == ()
        assert match.missing_preferred == ('Figma',)

    def test_all_required_no_preferred_caps_at_seventy(self):
        match = compute_skill_match(['Python', 'React'], ['Python', 'React'])
        assert match.score == 70
        assert match.missing_required == ()

    def test_full_match(self):
        match = compute_skill_match(['Python', 'React', 'Figma'], ['Python', 'React'], ['Figma'])
        assert match.score == 100
        assert match.quality == MatchQuality.PERFECT

    def test_partial_match_rounds_half_up(self):
        # 70 * 1/2 + 30 * 1/4 = 42.5
        match = compute_skill_match(['Python', 'Figma'], ['Python', 'React'], ['Figma', 'Canva', 'Excel', 'SQL'])
        assert match.score == 43

    def test_one_of_three_required(self):
        # 70 / 3 = 23.33
        match = compute_skill_match(['SQL'], ['Python', 'React', 'SQL'])
        assert match.score == 23
        assert match.matched_required == ('SQL',)
        assert match.missing_required == ('Python', 'React')

    def test_comparison_ignores_case_and_spacing(self):
        match = compute_skill_match([' react ', 'MACHINE   learning'], ['React', 'Machine Learning'])
        assert match.score == 70
        assert match.matched_required == ('React', 'Machine Learning')

    def test_preferred_duplicate_of_required_counts_once(self):
        match = compute_skill_match(['Python'], ['Python'], ['python', 'Figma'])
        assert match.matched_preferred == ()
        assert match.missing_preferred == ('Figma',)
        assert match.total_preferred == 1
        assert match.score == 70

    def test_duplicate_required_skills_collapse(self):
        match = compute_skill_match([], ['Python', 'python', ''])
        assert match.total_required == 1
        assert match.score == 0

    def test_user_without_skills(self):
        match = compute_skill_match([], ['Python'], ['Figma'])
        assert match.score == 0
        assert match.quality == MatchQuality.REACH

    def test_matched_skills_lists_required_first(self):
        match = compute_skill_match(['Figma', 'Python'], ['Python'], ['Figma'])
        assert match.matched_skills == ['Python', 'Figma']

    def test_to_dict(self):
        data = compute_skill_match(['Python'], ['Python', 'React']).to_dict()
        assert data['score'] == 35
        assert data['quality'] == 'reach'
        assert data['missing_required'] == ['React']
        assert data['total_required'] == 2
        assert data['message'] == "This project will help you develop new skills"

    def test_highlight_threshold(self):
        assert compute_skill_match(['A', 'B'], ['A', 'B']).is_highlighted
        assert not compute_skill_match(['A'], ['A', 'B']).is_highlighted


class TestMatchQuality:

    @pytest.mark.parametrize('score,quality', [
        (100, MatchQuality.PERFECT),
        (90, MatchQuality.PERFECT),
        (89, MatchQuality.STRONG),
        (75, MatchQuality.STRONG),
        (74, MatchQuality.GOOD),
        (60, MatchQuality.GOOD),
        (59, MatchQuality.STRETCH),
        (40, MatchQuality.STRETCH),
        (39, MatchQuality.REACH),
        (0, MatchQuality.REACH),
    ])
    def test_buckets(self, score, quality):
        assert match_quality(score) == quality

    def test_labels(self):
        assert MatchQuality.PERFECT.label == "Perfect Match"
        assert MatchQuality.REACH.label == "Reach Goal"

    def test_messages(self):
        assert match_message(95) == "You're an excellent match for this project!"
        assert match_message(80) == "You're a strong candidate for this project"
        assert match_message(60) == "You have good foundational skills for this project"
        assert match_message(10) == "This project will help you develop new skills"

    def test_reviewer_insight(self):
        assert reviewer_insight(85).startswith("Excellent candidate")
        assert reviewer_insight(65).startswith("Good candidate")
        assert reviewer_insight(None).startswith("Enthusiastic candidate")


class TestCoverageScore:

    def test_no_required_skills_is_zero(self):
        assert coverage_score(['Python'], []) == (0, [])

    def test_partial_coverage(self):
        pct, matched = coverage_score(['budgeting', 'Python'], ['Budgeting', 'Excel', 'Leadership'])
        assert pct == 33
        assert matched == ['Budgeting']

    def test_two_of_three(self):
        pct, _ = coverage_score(['Budgeting', 'Excel'], ['Budgeting', 'Excel', 'Leadership'])
        assert pct == 67


def test_normalize_skill():
    assert normalize_skill('  Machine   Learning ') == 'machine learning'
    assert normalize_skill(None) == ''
