"""Static HTML dashboard served at ``/``."""

from __future__ import annotations

INDEX_HTML = r"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <title>Quick Project Report</title>
  <link rel="stylesheet" href="https://cdn.jsdelivr.net/npm/jstree/dist/themes/default/style.min.css" />
  <link rel="stylesheet" href="https://cdn.jsdelivr.net/npm/prismjs@1.28.0/themes/prism-okaidia.min.css">
  <style>
    body { font-family: Arial, sans-serif; margin: 0; padding: 20px; background-color: #1e1e1e;
           color: #d4d4d4; display: flex; flex-direction: column; height: 100vh; }
    h1, h2 { text-align: center; color: #d4d4d4; }
    #controls { text-align: center; margin-bottom: 20px; }
    button { margin: 0 10px; padding: 10px 20px; font-size: 16px; background-color: #007acc;
             color: #fff; border: none; cursor: pointer; }
    button:hover { background-color: #005f99; }
    #main { display: flex; flex: 1; }
    #jstree { width: 30%; background-color: #252526; padding: 10px; overflow-y: auto; }
    #summary { width: 70%; padding: 20px; margin-left: 20px; overflow-y: auto; }
    pre { padding: 10px; overflow-x: auto; white-space: pre-wrap; word-wrap: break-word; }
    code { font-family: Consolas, 'Courier New', monospace; }
    .tab-container { width: 100%; display: flex; justify-content: center; margin-bottom: 20px; }
    .tab { padding: 10px 20px; cursor: pointer; background-color: #007acc; color: white;
           margin: 0 5px; border: none; }
    .tab.active { background-color: #005f99; }
    .content-container { display: none; }
    .content-container.active { display: block; }
  </style>
  <script src="https://cdn.jsdelivr.net/npm/jquery@3.6.0/dist/jquery.min.js"></script>
  <script src="https://cdn.jsdelivr.net/npm/jstree@3.3.12/dist/jstree.min.js"></script>
  <script src="https://cdn.jsdelivr.net/npm/prismjs@1.28.0/prism.min.js"></script>
</head>
<body>
  <h1>Quick Project Report</h1>
  <div class="tab-container">
    <button class="tab active" data-tab="file-tab">Files &amp; code</button>
    <button class="tab" data-tab="summary-tab">All summaries</button>
  </div>

  <div id="file-tab" class="content-container active">
    <div id="controls">
      <button onclick="fetchTree()">Show tree</button>
      <button onclick="fetchProgress()">Load progress</button>
    </div>
    <div id="main">
      <div id="jstree"></div>
      <div id="summary">
        <h2>Summary and source</h2>
        <div id="file-summary">Select a file to view its summary and source.</div>
      </div>
    </div>
  </div>

  <div id="summary-tab" class="content-container">
    <h2>All summaries</h2>
    <div id="progress"></div>
  </div>

  <script>
    let progressData = null;
    const languageMapping = {
      rs: "rust", py: "python", js: "javascript", ts: "typescript", java: "java", cpp: "cpp",
      c: "c", go: "go", sh: "bash", rb: "ruby", bat: "batch", cs: "csharp", resx: "xml",
      h: "clike", md: "markdown"
    };

    function showTab(tabId) {
      document.querySelectorAll('.content-container').forEach(el => el.classList.remove('active'));
      document.querySelectorAll('.tab').forEach(el => el.classList.remove('active'));
      document.getElementById(tabId).classList.add('active');
      document.querySelector(`[data-tab="${tabId}"]`).classList.add('active');
    }
    document.querySelectorAll('.tab').forEach(el => {
      el.addEventListener('click', () => showTab(el.dataset.tab));
    });

    async function fetchTree() {
      try {
        const response = await fetch('/filtered-tree');
        displayTree(await response.json());
      } catch (error) {
        console.error('Failed to load tree:', error);
      }
    }

    async function fetchProgress() {
      try {
        const response = await fetch('/progress');
        progressData = await response.json();
        displayProgress(progressData, document.getElementById('progress'));
      } catch (error) {
        console.error('Failed to load progress:', error);
      }
    }

    function displayProgress(progress, parent) {
      parent.innerHTML = '';
      const header = document.createElement('div');
      header.innerText = `Completed ${progress.completed_files} / ${progress.total_files} summaries`;
      parent.appendChild(header);
      const list = document.createElement('ul');
      for (const [filePath, summary] of Object.entries(progress.summaries)) {
        const li = document.createElement('li');
        li.textContent = `${filePath}: ${summary}`;
        list.appendChild(li);
      }
      parent.appendChild(list);
    }

    function displayTree(directory) {
      $('#jstree').jstree('destroy');
      $('#jstree').jstree({
        core: { data: [toJsTree(directory)], themes: { variant: 'large', dots: true, icons: true } },
        plugins: ['wholerow']
      });
      $('#jstree').on('select_node.jstree', function (e, data) {
        const node = data.node;
        if (node.original && node.original.type === 'file') {
          displayFileSummaryAndCode(node.original.path, node.original.summary);
          showTab('file-tab');
        } else {
          $('#file-summary').text('Select a file to view its summary and source.');
        }
      });
    }

    function toJsTree(directory) {
      const node = { text: directory.name, children: [], state: { opened: true },
                     type: 'folder', path: directory.path };
      for (const file of directory.files) {
        node.children.push({ text: file.name, type: 'file', icon: 'jstree-file',
                             path: `${directory.path.replace(/\/$/, '')}/${file.name}`,
                             summary: file.summary });
      }
      for (const subdir of directory.subdirs) {
        node.children.push(toJsTree(subdir));
      }
      return node;
    }

    async function displayFileSummaryAndCode(filePath, treeSummary) {
      const summary = (progressData && progressData.summaries[filePath]) || treeSummary;
      let codeContent = '';
      try {
        const response = await fetch('/get-file?path=' + encodeURIComponent(filePath));
        codeContent = response.ok ? await response.text() : 'Unable to load file contents.';
      } catch (error) {
        codeContent = 'Error while loading file contents.';
      }
      const extension = filePath.split('.').pop().toLowerCase();
      const language = languageMapping[extension] || 'plaintext';
      const container = $('#file-summary');
      container.empty();
      container.append($('<h3>').text('Summary'));
      container.append($('<p>').text(summary || 'No summary for this file.'));
      container.append($('<h3>').text('Source'));
      const code = $('<code>').addClass(`language-${language}`).text(codeContent);
      container.append($('<pre>').append(code));
      Prism.highlightAll();
    }
  </script>
</body>
</html>
"""

__all__ = ["INDEX_HTML"]
