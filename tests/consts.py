TEST_PDF_NAME = "Quarterly Report.PDF"
TEST_PDF_CONTENT = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<</Root 1 0 R>>\n%%EOF"
TEST_PDF_CONTENT_TYPE = "application/pdf"
TEST_PNG_NAME = "cover image (1).png"
TEST_PNG_CONTENT = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"
TEST_PNG_CONTENT_TYPE = "image/png"
TEST_BUCKET_NAME = "userDocuments"
