import pandas as pd

from commerce_core.quality import DataQualityChecker, DataQualityIssue


def issue_types(report):
    return {(i.column, i.issue_type) for i in report.issues}


def test_clean_table_has_no_issues():
    df = pd.DataFrame({"product_id": [1, 2], "quantity": [1, 3]})
    report = DataQualityChecker("Items").check_range("quantity", min_val=1).run(df)

    assert report.issues == []
    assert report.summary() == {
        "source": "Items",
        "total_rows": 2,
        "critical": 0,
        "warnings": 0,
        "info": 0,
    }


def test_missing_values_severity_by_share():
    df = pd.DataFrame({"seller_id": [1, None, None, 4], "title": ["a", "b", "c", "d"]})
    report = DataQualityChecker("Products").run(df)

    assert len(report.issues) == 1
    issue = report.issues[0]
    assert issue.column == "seller_id"
    assert issue.count == 2
    assert issue.percentage == 50.0
    assert report.has_critical_issues


def test_required_columns_limit_missing_check():
    df = pd.DataFrame({"order_id": [1, 2], "buyer_id": [None, None]})
    report = DataQualityChecker("Orders", required_columns=["order_id"]).run(df)
    assert report.issues == []


def test_duplicates_invalid_values_and_range():
    df = pd.DataFrame(
        {
            "order_id": [1, 1, 2, 3],
            "approval_status": ["approved", "shipped", "pending", "rejected"],
            "quantity": [1, 0, 2, 3],
        }
    )
    report = (
        DataQualityChecker("Items")
        .check_duplicates("order_id")
        .check_invalid_values("approval_status", {"pending", "approved", "rejected"})
        .check_range("quantity", min_val=1)
        .run(df)
    )

    assert issue_types(report) == {
        ("order_id", "duplicate"),
        ("approval_status", "invalid_value"),
        ("quantity", "out_of_range"),
    }
    invalid = next(i for i in report.issues if i.issue_type == "invalid_value")
    assert invalid.sample_values == ["shipped"]
    assert len(report.warning_issues) == 2


def test_orphan_references():
    items = pd.DataFrame({"product_id": [1, 2, 99]})
    report = (
        DataQualityChecker("Items")
        .check_references(
            "product_id", pd.Series([1, 2]), description="{count:,} unknown products"
        )
        .run(items)
    )

    assert report.issues[0].issue_type == "orphan"
    assert report.issues[0].description == "1 unknown products"


def test_custom_check():
    def no_free_items(df):
        free = df["price"] == 0
        return [
            DataQualityIssue(
                column="price",
                issue_type="invalid_value",
                severity="info",
                count=int(free.sum()),
                percentage=free.mean() * 100,
            )
        ]

    report = DataQualityChecker("Items").add_check(no_free_items).run(pd.DataFrame({"price": [0.0, 2.0]}))

    assert report.issues[0].count == 1
    assert report.summary()["info"] == 1
