"""Unit tests for core/checks.py"""

from notesite.core.checks import Issue, check_duplicates, check_menu, check_reachable, run_checks
from notesite.core.parse import collect_dir
from notesite.core.site import SiteConfig


def test_issue_str():
    assert str(Issue("posts/a.md", "draft", "excluded", "warning")) == "warning [draft] posts/a.md: excluded"


def test_check_duplicates(make_doc):
    docs = [make_doc("posts/b.md", "Same", 1), make_doc("posts/a.md", "Same", 1), make_doc("posts/c.md", "Same", 2)]
    issues = check_duplicates(docs)
    assert [(i.path, i.code) for i in issues] == [("posts/b.md", "duplicate")]
    assert "posts/a.md" in issues[0].message


def test_check_reachable(site, make_doc):
    docs = [
        make_doc("posts/a.md", "A", 1, tags=["GoLang"]),
        make_doc("posts/b.md", "B", 2),
        make_doc("posts/c.md", "C", 3, draft=True),
        make_doc("about.md", "About", 4),
    ]
    assert [i.path for i in check_reachable(site, docs)] == ["posts/b.md"]


def test_check_reachable_without_tags_taxonomy(make_doc):
    site = SiteConfig.model_validate({"taxonomies": {"category": "categories"}, "mainsections": ["posts"]})
    issues = check_reachable(site, [make_doc("posts/a.md", "A", 1, tags=["GoLang"])])
    assert len(issues) == 1 and "taxonomy" in issues[0].message


def test_check_menu_resolves(site, make_doc):
    docs = [make_doc("posts/a.md", "A", 1, tags=["GoLang"])]
    assert check_menu(site, docs) == []


def test_check_menu_missing_target(make_doc):
    site = SiteConfig.model_validate({"menu": {"main": [
        {"name": "Archive", "url": "/archives/"},
        {"name": "GitHub", "url": "https://github.com/"},
    ]}})
    issues = check_menu(site, [make_doc("posts/a.md", "A", 1)])
    assert [(i.path, i.code) for i in issues] == [("<menu>", "menu-url")]
    assert "Archive" in issues[0].message


def test_run_checks_clean(site, content_dir, now):
    """A valid tree yields only the draft warning."""
    issues = run_checks(site, content_dir, now)
    assert [(i.severity, i.code, i.path) for i in issues] == [("warning", "draft", "posts/pprof.md")]


def test_run_checks_reports_invalid_files(site, content_dir, now):
    (content_dir / "posts" / "broken.md").write_text("---\ntitle: Broken\n---\n")
    issues = run_checks(site, content_dir, now)
    invalid = [i for i in issues if i.code == "invalid-frontmatter"]
    assert len(invalid) == 1
    assert invalid[0].path == "posts/broken.md"
    assert invalid[0].message == "'date' is required"


def test_run_checks_build_drafts_no_warning(site, content_dir, now):
    drafts_site = site.model_copy(update={"build_drafts": True})
    assert run_checks(drafts_site, content_dir, now) == []


def test_run_checks_reports_undecodable_file(site, content_dir, now):
    (content_dir / "posts" / "latin1.md").write_bytes("---\ntitle: Café\ndate: 2024-01-01\n---\n".encode("latin-1"))
    issues = run_checks(site, content_dir, now)
    invalid = [i for i in issues if i.code == "invalid-frontmatter"]
    assert [i.path for i in invalid] == ["posts/latin1.md"]
    assert any(i.code == "draft" for i in issues)


def test_nested_section_intro_reported(site, content_dir, now):
    """A _index.md below the top level is flagged and its URL does not satisfy menu links."""
    (content_dir / "posts" / "go").mkdir()
    (content_dir / "posts" / "go" / "_index.md").write_text("---\ntitle: Go\n---\nGo notes.\n")
    issues = run_checks(site, content_dir, now)
    assert ("warning", "nested-section", "posts/go/_index.md") in [(i.severity, i.code, i.path) for i in issues]

    menu_site = SiteConfig.model_validate({"menu": {"main": [{"name": "Go", "url": "/posts/go/"}]}})
    issues = check_menu(menu_site, [d for d in collect_dir(content_dir)[0] if not d.draft])
    assert [i.code for i in issues] == ["menu-url"]
