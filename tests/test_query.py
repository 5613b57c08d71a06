from wishub.schema import Comment, Document, FolderInfo, Post
from wishub.search import MAX_RESULTS, NavigationAction, SearchSnapshot, search


def _folder(name, purpose="", description=""):
    return FolderInfo(id=name, name=name, purpose=purpose, description=description)


def _document(name, uploaded="2024-03-05T09:00:00.000Z"):
    return Document(name=name, size="1 KB", type="text/plain", dataUrl="data:,", uploadedAt=uploaded)


def _post(name, message, comments=()):
    return Post(name=name, message=message, comments=list(comments))


def _comment(name, message):
    return Comment(name=name, message=message)


def test_blank_query_returns_nothing():
    snapshot = SearchSnapshot(documents=(_document("anything.txt"),))
    assert search("", snapshot) == []
    assert search("   ", snapshot) == []


def test_no_matches_is_empty_not_an_error():
    assert search("zzz", SearchSnapshot(ui_folders=(_folder("Pages"),))) == []


def test_results_follow_collection_order():
    snapshot = SearchSnapshot(
        ui_folders=(_folder("login pages"),),
        api_folders=(_folder("login api"),),
        documents=(_document("login guide.pdf"),),
        discussions=(_post("Ana", "login is broken"),),
    )

    results = search("login", snapshot)

    assert [r.type for r in results] == ["folder", "folder", "document", "discussion"]
    assert [r.repo for r in results] == ["ui", "api", None, None]


def test_results_are_capped():
    snapshot = SearchSnapshot(documents=tuple(_document(f"report-{i}.pdf") for i in range(15)))
    results = search("report", snapshot)
    assert len(results) == MAX_RESULTS
    assert results[0].title == "report-0.pdf"


def test_folder_name_only_match_has_no_snippet():
    results = search("hooks", SearchSnapshot(ui_folders=(_folder("Hooks", purpose="Setup and teardown"),)))

    assert len(results) == 1
    assert results[0].snippet is None
    assert results[0].description == "Setup and teardown"
    assert results[0].action == NavigationAction(page="structure", repo="ui", folder_name="Hooks")


def test_folder_purpose_match_is_highlighted():
    folder = _folder("Pages", purpose="Page object models for the portal")
    result = search("object", SearchSnapshot(api_folders=(folder,)))[0]

    assert result.snippet.highlights == ["object"]
    assert result.action.repo == "api"


def test_folder_description_match_is_highlighted():
    folder = _folder("Stubs", description="WireMock stubs for the **patient** service")
    result = search("patient", SearchSnapshot(ui_folders=(folder,)))[0]

    assert result.snippet.highlights == ["patient"]
    assert result.description == "UI Test Automation Folder"


def test_document_matches_name_only():
    snapshot = SearchSnapshot(documents=(_document("Release Notes.docx"), _document("budget.xlsx")))
    results = search("notes", snapshot)

    assert [r.title for r in results] == ["Release Notes.docx"]
    assert results[0].description == "Uploaded 2024-03-05"
    assert results[0].snippet is None
    assert results[0].action == NavigationAction(page="documents")


def test_discussion_message_match():
    post = _post("Ana", "hello world", comments=[_comment("Ben", "hi")])
    result = search("world", SearchSnapshot(discussions=(post,)))[0]

    assert result.title == "Ana"
    assert result.description == "In post • 1 comments"
    assert result.snippet.highlights == ["world"]
    assert result.action == NavigationAction(page="community", post_id=post.id)


def test_discussion_first_matching_comment_wins():
    post = _post("Ana", "question", comments=[
        _comment("Ben", "no match here"),
        _comment("Cy", "try clearing the cache"),
        _comment("Dee", "cache again"),
    ])
    result = search("cache", SearchSnapshot(discussions=(post,)))[0]

    assert result.description == "In comment by Cy"
    assert result.snippet.text == "try clearing the cache"


def test_discussion_comment_author_match():
    post = _post("Ana", "question", comments=[_comment("Bernadette", "works for me")])
    result = search("bernadette", SearchSnapshot(discussions=(post,)))[0]

    assert result.description == "Comment author: Bernadette"
    assert result.snippet.text == "works for me"
    assert result.snippet.highlights == []


def test_discussion_title_only_match():
    post = _post("Deployment", "see attached", comments=[_comment("Ben", "ok"), _comment("Cy", "ok")])
    result = search("deploy", SearchSnapshot(discussions=(post,)))[0]

    assert result.snippet is None
    assert result.description == "2 comments"
