"""Shared fixtures for core unit tests"""

from datetime import datetime, timezone

import pytest

from notesite.core.models import ContentDoc
from notesite.core.site import SiteConfig, load_site_config


SITE_TOML = """\
baseURL = 'https://example.org/'
languageCode = 'en-us'
title = 'Memory notes'
mainsections = ["posts"]
enableRobotsTXT = true
buildDrafts = false

[taxonomies]
tag = 'tags'

[outputs]
home = ["HTML", "RSS"]

[languages.en]
languageName = "English"
weight = 1

  [languages.en.taxonomies]
  category = "categories"
  tag = "tags"

[[languages.en.menu.main]]
name = "Tags"
url = "tags/"
weight = 10

[[languages.en.menu.main]]
name = "Posts"
url = "posts"
weight = 5

[params]
author = "Kirill Sysoev"
ShowReadingTime = true
showtoc = true
"""

YAML_DOC = """\
---
title: Running goroutines with errgroup
date: 2024-03-02T10:15:00+01:00
draft: false
tags:
  - GoLang
  - Concurrency
---

# Intro

Body text.
"""

TOML_DOC = """\
+++
title = "Profiling with pprof"
date = 2024-04-18T09:00:00+02:00
draft = true
tags = ["GoLang", "Profiling"]
+++

Body.
"""


def _make_doc(path: str, title: str, day: int, tags=None, draft=False, weight=0) -> ContentDoc:
    """Build a ContentDoc without touching the filesystem."""
    section = path.split('/')[0] if '/' in path else ""
    slug = path.rsplit('/', 1)[-1].removesuffix('.md')
    return ContentDoc(
        path=path,
        slug=slug,
        section=section,
        title=title,
        date=datetime(2024, 1, day, 12, tzinfo=timezone.utc),
        draft=draft,
        tags=tags or [],
        weight=weight,
        body=f"Summary of {title}.\n",
    )


@pytest.fixture(name="make_doc")
def make_doc_fixture():
    return _make_doc


@pytest.fixture(name="now")
def now_fixture():
    return datetime(2025, 1, 1, tzinfo=timezone.utc)


@pytest.fixture(name="site_file")
def site_file_fixture(tmp_path):
    f = tmp_path / "hugo.toml"
    f.write_text(SITE_TOML)
    return f


@pytest.fixture(name="site")
def site_fixture(site_file) -> SiteConfig:
    return load_site_config(site_file)


@pytest.fixture(name="content_dir")
def content_dir_fixture(tmp_path):
    """A content dir with one published YAML post and one draft TOML post."""
    root = tmp_path / "content"
    (root / "posts").mkdir(parents=True)
    (root / "posts" / "errgroup.md").write_text(YAML_DOC)
    (root / "posts" / "pprof.md").write_text(TOML_DOC)
    return root
